import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

from .enums import BookingStatus, UserRole

Base = declarative_base()
metadata = Base.metadata


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp; every instant in the database is naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def naive_utc(value: datetime | None) -> datetime | None:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


t_office_owners = Table(
    'office_owners', metadata,
    Column('office_id', ForeignKey('offices.id', ondelete='CASCADE'), primary_key=True),
    Column('user_id', ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
)


class Users(Base):
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    email = Column(String(320), nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    role = Column(
        Enum(UserRole, name='user_role', native_enum=False, length=20),
        nullable=False,
        server_default=text("'VISITOR'"),
    )
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    offices = relationship('Offices', secondary=t_office_owners, back_populates='owners')
    created_bookings = relationship('Bookings', back_populates='created_by')


class Offices(Base):
    __tablename__ = 'offices'

    id = Column(String(36), primary_key=True, default=new_id)
    number = Column(String(64), nullable=False, unique=True)
    company_name = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    deleted_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    owners = relationship('Users', secondary=t_office_owners, back_populates='offices')
    availabilities = relationship('OfficeAvailability', back_populates='office')
    bookings = relationship('Bookings', back_populates='office')

    @property
    def owner_ids(self) -> list[str]:
        return [u.id for u in self.owners]

    @property
    def is_bookable(self) -> bool:
        return bool(self.is_active) and self.deleted_at is None


class OfficeAvailability(Base):
    __tablename__ = 'office_availability'
    __table_args__ = (
        CheckConstraint('available_to > available_from', name='availability_interval_valid'),
        Index('ix_office_availability_office_from', 'office_id', 'available_from'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    office_id = Column(ForeignKey('offices.id', ondelete='CASCADE'), nullable=False)
    available_from = Column(DateTime, nullable=False)
    available_to = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    office = relationship('Offices', back_populates='availabilities')


class Visitors(Base):
    __tablename__ = 'visitors'

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    email = Column(String(320), index=True)
    phone = Column(Text)
    document = Column(Text)
    company = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    bookings = relationship('Bookings', back_populates='visitor')


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        CheckConstraint('end_at > start_at', name='booking_interval_valid'),
        Index('ix_bookings_office_start', 'office_id', 'start_at'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    office_id = Column(ForeignKey('offices.id'), nullable=False)
    visitor_id = Column(ForeignKey('visitors.id', ondelete='SET NULL'))
    created_by_user_id = Column(ForeignKey('users.id', ondelete='SET NULL'))
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)
    status = Column(
        Enum(BookingStatus, name='booking_status', native_enum=False, length=20),
        nullable=False,
        server_default=text("'REQUESTED'"),
    )
    title = Column(Text)
    description = Column(Text)
    notes = Column(Text)
    needs_support = Column(Boolean, nullable=False, default=False)

    # Contact snapshot, kept even if the visitor record changes later
    visitor_name = Column(Text)
    visitor_email = Column(String(320))
    visitor_whatsapp = Column(Text)

    deleted_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    office = relationship('Offices', back_populates='bookings')
    visitor = relationship('Visitors', back_populates='bookings')
    created_by = relationship('Users', back_populates='created_bookings')

    def owned_by_email(self, email: str | None) -> bool:
        """Whether the email matches the booking's snapshot or linked visitor."""
        if not email:
            return False
        candidate = email.strip().lower()
        emails = [self.visitor_email]
        if self.visitor is not None:
            emails.append(self.visitor.email)
        return any(e and e.strip().lower() == candidate for e in emails)
