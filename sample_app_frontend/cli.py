"""
Command line entry point

    sample-app-frontend /path/to/config.json /path/to/tls.crt.key
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import structlog
import uvicorn

from sample_app_frontend.config import LISTEN_HOST, get_settings, load_runtime
from sample_app_frontend.main import create_app
from sample_app_frontend.models import ConfigurationError, FrontendRuntime
from sample_app_frontend.utils.logger import setup_logging

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sample-app-frontend",
        description="TLS frontend for the sample app. Requires exactly two arguments: "
                    "the path to a config file and the path to a private TLS cert key.",
    )
    parser.add_argument("config_path", type=Path, help="JSON config file with a 'greeting' field")
    parser.add_argument("key_path", type=Path, help="PEM private key for the server certificate")
    return parser


def build_server_config(runtime: FrontendRuntime) -> uvicorn.Config:
    """uvicorn config for a TLS-only listener on all interfaces"""
    settings = runtime.settings
    return uvicorn.Config(
        create_app(runtime),
        host=LISTEN_HOST,
        port=settings.port,
        ssl_keyfile=str(runtime.tls.key_file),
        ssl_certfile=str(runtime.tls.cert_file),
        ssl_ca_certs=str(runtime.tls.ca_file),
        # SIGINT stops the process without draining in-flight requests
        timeout_graceful_shutdown=0,
        log_config=None,
        log_level=settings.log_level.lower(),
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ConfigurationError as e:
        setup_logging()
        logger.error("Startup failed", error=str(e))
        return 1

    setup_logging(settings.log_level, settings.log_format)
    settings.log_config()

    try:
        runtime = load_runtime(args.config_path, args.key_path, settings)
    except ConfigurationError as e:
        logger.error("Startup failed", error=str(e))
        return 1

    server = uvicorn.Server(build_server_config(runtime))
    logger.info(f"Server running at https://{LISTEN_HOST}:{settings.port}")
    server.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
