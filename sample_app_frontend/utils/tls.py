"""
TLS Material and Trust Policy
Loads certificate files per environment and decides how outbound calls verify peers
"""

import ssl
from pathlib import Path
from typing import Optional, Union

import structlog

from sample_app_frontend.models import (
    DeploymentEnvironment, TlsMaterial, TlsMaterialError, TrustPolicy
)

logger = structlog.get_logger(__name__)


def ca_bundle_path(tls_dir: Path, environment: DeploymentEnvironment) -> Path:
    return Path(tls_dir) / f"ca-{environment.name}.crt.pem"


def certificate_path(tls_dir: Path, environment: DeploymentEnvironment) -> Path:
    return Path(tls_dir) / f"cert-{environment.name}.crt.pem"


def internal_alb_ca_path(tls_dir: Path, environment: DeploymentEnvironment) -> Path:
    return Path(tls_dir) / f"internal-alb-{environment.name}-ca.pem"


def _read_pem(path: Path, description: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TlsMaterialError(f"Cannot read {description} {path}: {e}") from e


def load_tls_material(
    tls_dir: Path,
    environment: DeploymentEnvironment,
    key_path: Path,
) -> TlsMaterial:
    """
    Load the listener certificate files and, outside development, the internal ALB CA

    Every file is read once here so that a missing or unreadable file stops
    startup instead of failing on the first request.
    """
    key_file = Path(key_path)
    cert_file = certificate_path(tls_dir, environment)
    ca_file = ca_bundle_path(tls_dir, environment)

    _read_pem(key_file, "private key")
    _read_pem(cert_file, "certificate")
    _read_pem(ca_file, "CA bundle")

    internal_alb_ca: Optional[str] = None
    if not environment.is_development:
        alb_ca_file = internal_alb_ca_path(tls_dir, environment)
        internal_alb_ca = _read_pem(alb_ca_file, "internal ALB CA")
        try:
            ssl.create_default_context(cadata=internal_alb_ca)
        except (ssl.SSLError, ValueError) as e:
            raise TlsMaterialError(f"Invalid internal ALB CA {alb_ca_file}: {e}") from e

    logger.info(
        "TLS material loaded",
        environment=environment.name,
        cert_file=str(cert_file),
        ca_file=str(ca_file),
        verifies_backend=internal_alb_ca is not None,
    )
    return TlsMaterial(
        key_file=key_file,
        cert_file=cert_file,
        ca_file=ca_file,
        internal_alb_ca=internal_alb_ca,
    )


def policy_for(environment: DeploymentEnvironment, tls: TlsMaterial) -> TrustPolicy:
    """
    Decide how outbound calls verify the backend certificate

    In development the apps talk to each other directly with self-signed
    certificates, so verification is off. Everywhere else calls go through
    the internal ALB whose CA was loaded at startup.
    """
    if environment.is_development:
        return TrustPolicy.insecure()
    if not tls.internal_alb_ca:
        raise TlsMaterialError(
            f"No internal ALB CA loaded for environment '{environment.name}'"
        )
    return TrustPolicy.verify_against(tls.internal_alb_ca)


def ssl_verify_for(policy: TrustPolicy) -> Union[bool, ssl.SSLContext]:
    """Translate a trust policy into an httpx ``verify`` argument"""
    if not policy.verifies_peer:
        return False
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH, cadata=policy.ca_bundle)
    return context
