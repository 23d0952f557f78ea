"""
Pytest fixtures for sample-app-frontend tests
"""

import json
import socket
import ssl
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Dict, List

import pytest
from fastapi.testclient import TestClient

from sample_app_frontend.config import FrontendSettings, get_settings, load_runtime
from sample_app_frontend.main import create_app
from tests.pki import Issued, issue_server_cert, make_ca

SETTINGS_ENV_VARS = [
    "VPC_NAME", "PORT", "CONTEXT_PATH", "INTERNAL_ALB_URL", "BACKEND_PORT",
    "TLS_DIR", "BACKEND_TIMEOUT", "LOG_LEVEL", "LOG_FORMAT",
]

GREETING = "Hello from the sample app! ¡Hola! 👋"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate settings from the host environment"""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def listener_ca() -> Issued:
    return make_ca("Sample App Listener CA")


@pytest.fixture(scope="session")
def internal_alb_ca() -> Issued:
    return make_ca("Internal ALB CA")


@pytest.fixture(scope="session")
def unrelated_ca() -> Issued:
    return make_ca("Somebody Else's CA")


@pytest.fixture
def tls_dir(tmp_path, listener_ca, internal_alb_ca) -> Path:
    """TLS directory laid out for the development and staging environments"""
    directory = tmp_path / "tls"
    directory.mkdir()
    listener_cert = issue_server_cert(listener_ca)
    for env in ("development", "staging"):
        (directory / f"ca-{env}.crt.pem").write_bytes(listener_ca.cert_pem)
        (directory / f"cert-{env}.crt.pem").write_bytes(listener_cert.cert_pem)
    (directory / "internal-alb-staging-ca.pem").write_bytes(internal_alb_ca.cert_pem)
    (directory / "tls.crt.key").write_bytes(listener_cert.key_pem)
    return directory


@pytest.fixture
def key_path(tls_dir) -> Path:
    return tls_dir / "tls.crt.key"


@pytest.fixture
def config_path(tmp_path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"greeting": GREETING, "unused": {"nested": True}}), encoding="utf-8")
    return path


@pytest.fixture
def make_runtime(tls_dir, key_path, config_path):
    """Build a runtime for an environment with optional settings overrides"""

    def _make(vpc_name: str = "development", **overrides):
        settings = FrontendSettings(vpc_name=vpc_name, tls_dir=tls_dir, **overrides)
        return load_runtime(config_path, key_path, settings)

    return _make


@pytest.fixture
def runtime(make_runtime):
    return make_runtime()


@pytest.fixture
def client(runtime):
    with TestClient(create_app(runtime)) as test_client:
        yield test_client


class BackendHandler(BaseHTTPRequestHandler):
    """Answers like the sample backend and remembers every request"""

    responses: Dict[str, tuple] = {
        "/sample-app-backend": (200, b"Hello from the backend"),
        "/sample-app-backend/db": (200, b"Database connection OK"),
    }

    def do_GET(self):
        self.server.requests.append((self.command, self.path))
        status, body = self.responses.get(self.path, (404, b"backend: no such path"))
        self.send_response(status)
        self.send_header("Content-Type", "text/plain")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Connection", "close")
        self.end_headers()
        # Two writes so the client sees the body in more than one chunk
        half = len(body) // 2
        self.wfile.write(body[:half])
        self.wfile.flush()
        self.wfile.write(body[half:])

    def log_message(self, fmt, *args):
        return


class HttpsBackend:
    def __init__(self, server: ThreadingHTTPServer):
        self.server = server

    @property
    def port(self) -> int:
        return self.server.server_address[1]

    @property
    def requests(self) -> List[tuple]:
        return self.server.requests


@pytest.fixture
def https_backend(tmp_path):
    """Start an HTTPS backend on 127.0.0.1 presenting the given certificate"""
    servers = []

    def _start(certificate: Issued) -> HttpsBackend:
        cert_file, key_file = certificate.write(tmp_path, f"backend-{len(servers)}")
        server = ThreadingHTTPServer(("127.0.0.1", 0), BackendHandler)
        server.requests = []
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        context.load_cert_chain(certfile=str(cert_file), keyfile=str(key_file))
        server.socket = context.wrap_socket(server.socket, server_side=True)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append((server, thread))
        return HttpsBackend(server)

    yield _start

    for server, thread in servers:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


@pytest.fixture
def closed_port() -> int:
    """A local port with nothing listening on it"""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
