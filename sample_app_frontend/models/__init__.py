"""
Frontend data models
"""

from .errors import (
    FrontendError, ConfigurationError, TlsMaterialError,
    ServiceCallError, ServiceErrorBody
)
from .runtime import (
    StaticConfig, DeploymentEnvironment, TlsMaterial, BackendTarget,
    TrustPolicy, TrustMode, FrontendRuntime, DEVELOPMENT
)
