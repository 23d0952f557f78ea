"""
Frontend Errors
Exception hierarchy and the JSON shape of outbound call failures
"""

from typing import Optional

from pydantic import BaseModel


class FrontendError(Exception):
    """Base class for all frontend errors"""


class ConfigurationError(FrontendError):
    """Startup configuration could not be loaded"""


class TlsMaterialError(ConfigurationError):
    """A certificate, key or CA file could not be read"""


class ServiceErrorBody(BaseModel):
    """JSON body returned to the client when the backend call fails"""

    code: str
    message: str
    url: str
    errno: Optional[int] = None
    syscall_error: Optional[str] = None


class ServiceCallError(FrontendError):
    """
    Outbound backend call failed at the transport level

    Raised for refused connections, DNS failures, TLS handshake and
    certificate verification failures and peer resets. Never raised for
    non-2xx backend responses.
    """

    def __init__(self, code: str, message: str, url: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.url = url
        self.cause = cause

    @classmethod
    def from_exception(cls, exc: BaseException, url: str) -> "ServiceCallError":
        return cls(
            code=type(exc).__name__,
            message=str(exc) or repr(exc),
            url=url,
            cause=exc,
        )

    def _root_os_error(self) -> Optional[OSError]:
        seen = set()
        current = self.cause
        while current is not None and id(current) not in seen:
            seen.add(id(current))
            if isinstance(current, OSError) and current.errno is not None:
                return current
            current = current.__cause__ or current.__context__
        return None

    def to_body(self) -> ServiceErrorBody:
        os_error = self._root_os_error()
        return ServiceErrorBody(
            code=self.code,
            message=self.message,
            url=self.url,
            errno=os_error.errno if os_error else None,
            syscall_error=os_error.strerror if os_error else None,
        )

    def to_json(self) -> str:
        return self.to_body().model_dump_json(exclude_none=True)
