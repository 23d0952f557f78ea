"""
Service Routes
Proxy the backend service through the internal ALB
"""

from fastapi import Request
from fastapi.responses import HTMLResponse

from sample_app_frontend.models import ServiceCallError
from sample_app_frontend.utils.dependencies import get_service_client

RESPONSE_PREFIX = "Response from service: "


async def _call_backend(request: Request, suffix: str) -> HTMLResponse:
    client = get_service_client(request)
    try:
        body = await client.fetch(suffix)
    except ServiceCallError as e:
        return HTMLResponse(content=e.to_json(), status_code=500)
    return HTMLResponse(content=RESPONSE_PREFIX + body)


async def service(request: Request) -> HTMLResponse:
    """Backend root"""
    return await _call_backend(request, "")


async def service_db(request: Request) -> HTMLResponse:
    """Backend database check"""
    return await _call_backend(request, "/db")
