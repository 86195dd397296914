from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Awaitable, Callable, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"

_GAME_PATH = re.compile(r"^/api/games/([^/]+)")


def _game_id(path: str) -> Optional[str]:
    m = _GAME_PATH.match(path)
    return m.group(1) if m else None


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and log it together with the game it targets.

    An incoming ``x-request-id`` header is reused so a UI can correlate its
    own logs; otherwise a uuid4 is generated. The ID is stored on
    ``request.state`` for the error handlers and echoed in the response.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        fields: Dict[str, object] = {"request_id": request_id}
        game_id = _game_id(request.url.path)
        if game_id is not None:
            fields["game_id"] = game_id

        logger.info(
            "%s %s", request.method, request.url.path, extra={**fields, "method": request.method}
        )

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "-> %d in %dms",
            response.status_code,
            elapsed_ms,
            extra={**fields, "status_code": response.status_code, "duration_ms": elapsed_ms},
        )
        return response
