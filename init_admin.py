import os
import logging

from dotenv import load_dotenv

from office_booking.database import SessionLocal, init_db
from office_booking.models import UserRole, Users
from office_booking.security import hash_password
from office_booking.services.users import get_user_by_email


# ======================================================
# ENV
# ======================================================

load_dotenv()

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Admin")

logger = logging.getLogger("office_booking.bootstrap")


# ======================================================
# MAIN LOGIC
# ======================================================

def main():
    if not ADMIN_EMAIL:
        raise RuntimeError("ADMIN_EMAIL is not set")
    if not ADMIN_PASSWORD:
        raise RuntimeError("ADMIN_PASSWORD is not set")

    init_db()

    with SessionLocal() as db:
        user = get_user_by_email(db, ADMIN_EMAIL)

        # ==================================================
        # CASE 1: NO SUCH USER
        # ==================================================
        if user is None:
            db.add(Users(
                name=ADMIN_NAME,
                email=ADMIN_EMAIL.strip().lower(),
                password_hash=hash_password(ADMIN_PASSWORD),
                role=UserRole.ADMIN,
            ))
            db.commit()
            logger.info(f"[BOOTSTRAP] Admin created ({ADMIN_EMAIL})")

        # ==================================================
        # CASE 2: USER EXISTS WITH ANOTHER ROLE
        # ==================================================
        elif user.role != UserRole.ADMIN or not user.is_active:
            user.role = UserRole.ADMIN
            user.is_active = True
            db.commit()
            logger.info(f"[BOOTSTRAP] Admin role granted ({ADMIN_EMAIL})")

        else:
            logger.info("[BOOTSTRAP] Admin already exists, nothing to do")


# ======================================================
# ENTRYPOINT
# ======================================================

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
