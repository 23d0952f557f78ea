"""
Sample App Frontend
TLS-terminating frontend that serves a static page and proxies to the backend service
"""

__version__ = "1.0.0"
