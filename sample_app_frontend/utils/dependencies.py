"""
Request Dependencies
Runtime and backend client lookups for route handlers
"""

from fastapi import Request

from sample_app_frontend.models import FrontendRuntime
from sample_app_frontend.utils.service_client import BackendServiceClient


def get_runtime(request: Request) -> FrontendRuntime:
    """Runtime loaded at startup"""
    return request.app.state.runtime


def get_service_client(request: Request) -> BackendServiceClient:
    """Backend client bound to the startup runtime"""
    factory = getattr(request.app.state, "service_client_factory", BackendServiceClient)
    return factory(get_runtime(request))
