"""
Configuration Management
Environment-based settings, the JSON config file and startup runtime assembly
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

import structlog
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sample_app_frontend.models import (
    BackendTarget, ConfigurationError, DeploymentEnvironment, FrontendRuntime,
    StaticConfig, DEVELOPMENT
)
from sample_app_frontend.utils.tls import load_tls_material

logger = structlog.get_logger(__name__)

LISTEN_HOST = "0.0.0.0"
BACKEND_SERVICE_PATH = "/sample-app-backend"
INDEX_HTML_PATH = Path(__file__).parent / "static" / "index.html"


class FrontendSettings(BaseSettings):
    """Frontend settings read from environment variables"""

    # Deployment
    vpc_name: str = DEVELOPMENT
    port: int = 3000
    context_path: str = "/sample-app-frontend"
    tls_dir: Path = Path("tls")

    # Backend service
    internal_alb_url: Optional[str] = None
    backend_port: int = 80
    backend_timeout: Optional[float] = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        frozen=True,
    )

    @field_validator("port", "backend_port")
    @classmethod
    def validate_port(cls, v):
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("context_path")
    @classmethod
    def validate_context_path(cls, v):
        # Routes are the literal concatenation P + suffix, so "/" serves "/" and "//health"
        if v and not v.startswith("/"):
            raise ValueError("CONTEXT_PATH must be empty or start with '/'")
        return v

    @field_validator("vpc_name")
    @classmethod
    def validate_vpc_name(cls, v):
        if not v:
            raise ValueError("VPC_NAME must not be empty")
        return v

    @field_validator("backend_timeout")
    @classmethod
    def validate_backend_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("BACKEND_TIMEOUT must be positive")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        v = v.lower()
        if v not in ("console", "json"):
            raise ValueError("LOG_FORMAT must be 'console' or 'json'")
        return v

    @property
    def environment(self) -> DeploymentEnvironment:
        return DeploymentEnvironment(self.vpc_name)

    @property
    def load_balancer_base_url(self) -> str:
        return self.internal_alb_url or f"localhost:{self.port}"

    @property
    def backend_target(self) -> BackendTarget:
        host, embedded_port = split_host_port(self.load_balancer_base_url)
        if embedded_port is not None and embedded_port != self.backend_port:
            logger.warning(
                "Ignoring port embedded in load balancer URL",
                url=self.load_balancer_base_url,
                embedded_port=embedded_port,
                backend_port=self.backend_port,
            )
        return BackendTarget(host=host, port=self.backend_port, base_path=BACKEND_SERVICE_PATH)

    def log_config(self):
        """Log configuration (without key material)"""
        target = self.backend_target
        logger.info("Environment", vpc_name=self.vpc_name)
        logger.info("Listener", host=LISTEN_HOST, port=self.port, context_path=self.context_path)
        logger.info("Backend", host=target.host, port=target.port, path=target.base_path)
        logger.info("TLS directory", tls_dir=str(self.tls_dir))
        if self.backend_timeout is None:
            logger.info("Backend calls have no timeout")


def split_host_port(url: str) -> Tuple[str, Optional[int]]:
    """
    Split a load balancer base URL into host and optional port

    Accepts ``host``, ``host:port``, ``[v6]:port`` and the same forms with a
    scheme and/or trailing path, which are dropped.
    """
    raw = url.strip()
    if "://" in raw:
        raw = raw.split("://", 1)[1]
    raw = raw.split("/", 1)[0]
    if not raw:
        raise ConfigurationError(f"Invalid load balancer URL: {url!r}")

    if raw.startswith("["):
        end = raw.find("]")
        if end == -1:
            raise ConfigurationError(f"Invalid load balancer URL: {url!r}")
        host, rest = raw[1:end], raw[end + 1:]
        port_text = rest[1:] if rest.startswith(":") else ""
    elif raw.count(":") == 1:
        host, port_text = raw.split(":")
    else:
        host, port_text = raw, ""

    if not port_text:
        return host, None
    if not port_text.isdigit():
        raise ConfigurationError(f"Invalid port in load balancer URL: {url!r}")
    return host, int(port_text)


@lru_cache()
def get_settings() -> FrontendSettings:
    """Get settings instance"""
    try:
        return FrontendSettings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid environment configuration: {e}") from e


def load_static_config(config_path: Path) -> StaticConfig:
    """Read and validate the JSON config file"""
    try:
        raw = Path(config_path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {config_path}: {e}") from e

    try:
        return StaticConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config file {config_path}: {e}") from e


def load_index_html(path: Path = INDEX_HTML_PATH) -> bytes:
    """Read the static page served at the context path"""
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise ConfigurationError(f"Cannot read static page {path}: {e}") from e


def load_runtime(
    config_path: Path,
    key_path: Path,
    settings: Optional[FrontendSettings] = None,
    index_path: Path = INDEX_HTML_PATH,
) -> FrontendRuntime:
    """
    Build the immutable runtime used by the listener

    Args:
        config_path: JSON config file with the greeting
        key_path: PEM private key for the listener certificate
        settings: Settings override (defaults to the environment)
        index_path: Static page to serve

    Returns:
        FrontendRuntime

    Raises:
        ConfigurationError: If any input cannot be loaded
    """
    settings = settings or get_settings()
    environment = settings.environment

    static_config = load_static_config(config_path)
    tls = load_tls_material(settings.tls_dir, environment, key_path)

    runtime = FrontendRuntime(
        settings=settings,
        static_config=static_config,
        index_html=load_index_html(index_path),
        tls=tls,
        environment=environment,
        backend=settings.backend_target,
    )
    logger.info("Runtime loaded", environment=str(environment), config=str(config_path))
    return runtime
