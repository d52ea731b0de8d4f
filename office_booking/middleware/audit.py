# office_booking/middleware/audit.py
# writes: method / path / status; client type; IP / UA; processing time
# never blocks the request, never writes to the DB

import json
import logging
import time

from fastapi import Request

from .rate_limit import client_ip

logger = logging.getLogger("office_booking.audit")


async def audit_middleware(request: Request, call_next):
    start_ts = time.time()

    response = await call_next(request)

    duration_ms = int((time.time() - start_ts) * 1000)

    record = {
        "ts": int(start_ts),
        "method": request.method,
        "path": request.url.path,
        "status": response.status_code,
        "client_type": "authenticated" if request.headers.get("Authorization") else "public",
        "ip": client_ip(request),
        "ua": request.headers.get("User-Agent", ""),
        "duration_ms": duration_ms,
    }

    logger.info(json.dumps(record, ensure_ascii=False))

    return response
