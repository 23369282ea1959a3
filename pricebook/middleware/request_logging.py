# pricebook/middleware/request_logging.py

import logging
import time
import uuid

from fastapi import Request

from pricebook.utils.logger import get_logger

logger = get_logger("access")

REQUEST_ID_HEADER = "X-Request-ID"


async def request_logging_middleware(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
    request.state.request_id = request_id
    started = time.perf_counter()

    response = await call_next(request)

    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    response.headers[REQUEST_ID_HEADER] = request_id

    # set by get_current_user on authenticated routes
    user = getattr(request.state, "user", None)

    logger.log(
        logging.WARNING if response.status_code >= 500 else logging.INFO,
        "%s %s", request.method, request.url.path,
        extra={
            "request_id": request_id,
            "client_addr": request.client.host if request.client else "unknown",
            "user_id": user.id if user else "-",
            "status_code": response.status_code,
            "process_time_ms": elapsed_ms,
        },
    )

    return response
