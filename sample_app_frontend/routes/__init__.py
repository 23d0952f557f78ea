"""
Frontend routes

Routes are keyed by the exact request target the client sent. The HTTP
method is never inspected.
"""

from typing import Awaitable, Callable, Dict

from starlette.requests import Request
from starlette.responses import Response

from sample_app_frontend.routes import pages, service

Handler = Callable[[Request], Awaitable[Response]]


def build_route_table(context_path: str) -> Dict[str, Handler]:
    """Map every served request target to its handler"""
    return {
        context_path: pages.index,
        context_path + "/health": pages.health_check,
        context_path + "/greeting": pages.greeting,
        context_path + "/service": service.service,
        context_path + "/service/db": service.service_db,
    }
