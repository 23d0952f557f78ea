"""
Backend Service Client
HTTPS client for the sample backend, reached through the internal ALB
"""

from typing import List, Optional

import httpx
import structlog

from sample_app_frontend.models import FrontendRuntime, ServiceCallError
from sample_app_frontend.utils.tls import policy_for, ssl_verify_for

logger = structlog.get_logger(__name__)


class BackendServiceClient:
    """HTTP client for backend service calls"""

    def __init__(
        self,
        runtime: FrontendRuntime,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.target = runtime.backend
        self.environment = runtime.environment
        self.tls = runtime.tls
        # No timeout unless BACKEND_TIMEOUT is set; a hung backend hangs the call.
        self.timeout = httpx.Timeout(runtime.settings.backend_timeout)
        self._transport = transport

    async def fetch(self, suffix: str = "") -> str:
        """
        GET the backend path plus ``suffix`` and return the whole body

        The response status is not inspected, so a backend error page is
        returned like any other body. The call is made once and never retried.

        Args:
            suffix: Appended to the backend base path ("" or "/db")

        Returns:
            Response body decoded as UTF-8

        Raises:
            ServiceCallError: On any connection, TLS or protocol failure
        """
        url = self.target.url_for(suffix)
        policy = policy_for(self.environment, self.tls)
        logger.debug("Calling backend", url=str(url), trust=policy.mode.value)

        chunks: List[bytes] = []
        try:
            async with httpx.AsyncClient(
                verify=ssl_verify_for(policy),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                async with client.stream("GET", url) as response:
                    async for chunk in response.aiter_bytes():
                        chunks.append(chunk)
        except httpx.HTTPError as e:
            logger.warning("Backend call failed", url=str(url), error=type(e).__name__, detail=str(e))
            raise ServiceCallError.from_exception(e, str(url)) from e

        body = b"".join(chunks).decode("utf-8", errors="replace")
        logger.debug("Backend responded", url=str(url), status=response.status_code, length=len(body))
        return body
