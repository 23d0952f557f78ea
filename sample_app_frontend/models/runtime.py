"""
Runtime Models
Immutable startup state shared by every request
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, TYPE_CHECKING

import httpx
from pydantic import BaseModel, ConfigDict, StrictStr

if TYPE_CHECKING:
    from sample_app_frontend.config import FrontendSettings

DEVELOPMENT = "development"


class StaticConfig(BaseModel):
    """Contents of the JSON config file passed on the command line"""

    model_config = ConfigDict(extra="ignore", frozen=True)

    greeting: StrictStr


@dataclass(frozen=True)
class DeploymentEnvironment:
    """Named deployment mode; only ``development`` is special"""

    name: str

    @property
    def is_development(self) -> bool:
        return self.name == DEVELOPMENT

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class TlsMaterial:
    """Certificate files for the listener and the CA trusted for outbound calls"""

    key_file: Path
    cert_file: Path
    ca_file: Path
    internal_alb_ca: Optional[str] = None


class TrustMode(str, Enum):
    """Outbound certificate verification modes"""
    INSECURE = "insecure"
    VERIFY = "verify"


@dataclass(frozen=True)
class TrustPolicy:
    """Resolved outbound trust policy; ``ca_bundle`` is set only for VERIFY"""

    mode: TrustMode
    ca_bundle: Optional[str] = None

    @classmethod
    def insecure(cls) -> "TrustPolicy":
        return cls(TrustMode.INSECURE)

    @classmethod
    def verify_against(cls, ca_bundle: str) -> "TrustPolicy":
        return cls(TrustMode.VERIFY, ca_bundle)

    @property
    def verifies_peer(self) -> bool:
        return self.mode is TrustMode.VERIFY


@dataclass(frozen=True)
class BackendTarget:
    """Where the backend service lives"""

    host: str
    port: int
    base_path: str

    def url_for(self, suffix: str = "") -> httpx.URL:
        return httpx.URL(
            scheme="https",
            host=self.host,
            port=self.port,
            path=self.base_path + suffix,
        )


@dataclass(frozen=True)
class FrontendRuntime:
    """Everything loaded at startup, read-only afterwards"""

    settings: "FrontendSettings"
    static_config: StaticConfig
    index_html: bytes
    tls: TlsMaterial
    environment: DeploymentEnvironment
    backend: BackendTarget

    @property
    def context_path(self) -> str:
        return self.settings.context_path
