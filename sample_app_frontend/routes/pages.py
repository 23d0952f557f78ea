"""
Page Routes
Static page, health check and greeting
"""

from fastapi import Request
from fastapi.responses import HTMLResponse

from sample_app_frontend.utils.dependencies import get_runtime


async def index(request: Request) -> HTMLResponse:
    """Bundled index page, served byte for byte"""
    return HTMLResponse(content=get_runtime(request).index_html)


async def health_check(request: Request) -> HTMLResponse:
    """Basic health check"""
    return HTMLResponse(content="OK")


async def greeting(request: Request) -> HTMLResponse:
    """Greeting from the config file"""
    return HTMLResponse(content=get_runtime(request).static_config.greeting)
