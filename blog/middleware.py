import logging
from urllib.parse import urlparse

from fastapi import Request
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class CSRFOriginMiddleware(BaseHTTPMiddleware):
    """
    Validate Origin/Referer headers on state-changing requests to prevent CSRF.

    - POST, PUT, PATCH, DELETE must include a matching Origin or Referer header
    - GET, HEAD, OPTIONS are always allowed (safe methods)
    - Paths in exempt_paths are skipped
    """

    SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}

    def __init__(self, app, exempt_paths=("/health",)):
        super().__init__(app)
        self.exempt_paths = set(exempt_paths)

    @staticmethod
    def _reject(reason: str, request: Request, value: str = "") -> PlainTextResponse:
        logger.warning(
            "CSRF %s: value=%s, host=%s, method=%s, path=%s",
            reason,
            value,
            request.headers.get("host", ""),
            request.method,
            request.url.path,
        )
        return PlainTextResponse("Origin validation failed", status_code=403)

    async def dispatch(self, request: Request, call_next):
        if request.method in self.SAFE_METHODS:
            return await call_next(request)

        if request.url.path in self.exempt_paths:
            return await call_next(request)

        expected_host = request.headers.get("host", "")

        # Origin first, then Referer
        for header in ("origin", "referer"):
            value = request.headers.get(header)
            # Privacy-sensitive contexts send the literal "null"
            if not value or value == "null":
                continue
            if urlparse(value).netloc != expected_host:
                return self._reject(f"{header} mismatch", request, value)
            return await call_next(request)

        return self._reject("missing origin/referer", request)
