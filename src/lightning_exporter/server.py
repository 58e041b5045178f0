"""
HTTP exposition. A small WSGI app that serves the registry at the
telemetry path and a landing page at /, run on wsgiref like
prometheus_client's own start_http_server.
"""

from __future__ import annotations

import html
import logging
import socket
from socketserver import ThreadingMixIn
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app

from lightning_exporter.errors import ConfigurationError

log = logging.getLogger(__name__)

LANDING_PAGE = """<html>
<head><title>Lightning Exporter</title></head>
<body>
<h1>Lightning Exporter</h1>
<p><a href='{path}'>Metrics</a></p>
</body>
</html>
"""


def make_app(registry: CollectorRegistry, metrics_path: str = "/metrics"):
    metrics_app = make_wsgi_app(registry)
    landing = LANDING_PAGE.format(path=html.escape(metrics_path, quote=True)).encode()

    def app(environ, start_response):
        path = environ.get("PATH_INFO", "/")

        if path == metrics_path:
            return metrics_app(environ, start_response)

        if path == "/":
            start_response("200 OK", [
                ("Content-Type", "text/html; charset=utf-8"),
                ("Content-Length", str(len(landing))),
            ])
            return [landing]

        start_response("404 Not Found", [("Content-Type", "text/plain")])
        return [b"Not Found\n"]

    return app


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        log.debug("%s - %s", self.address_string(), format % args)


def _best_family(host: str, port: int) -> int:
    # wsgiref's server is AF_INET only; pick the family the host resolves to
    infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE)
    return infos[0][0]


def make_exporter_server(registry: CollectorRegistry, host: str, port: int,
                         metrics_path: str = "/metrics") -> WSGIServer:
    """Bind the exposition app to host:port. Port 0 picks a free port."""
    try:
        family = _best_family(host, port)
    except socket.gaierror as exc:
        raise ConfigurationError(f"cannot listen on {host}:{port}: {exc}") from exc

    class _Server(_ThreadingWSGIServer):
        address_family = family

    try:
        return make_server(
            host, port, make_app(registry, metrics_path),
            server_class=_Server, handler_class=_QuietHandler,
        )
    except OSError as exc:
        raise ConfigurationError(f"cannot listen on {host}:{port}: {exc}") from exc


def serve(registry: CollectorRegistry, host: str, port: int, metrics_path: str = "/metrics"):
    """Serve until interrupted."""
    httpd = make_exporter_server(registry, host, port, metrics_path)
    log.info("Listening on http://%s:%d%s", host, httpd.server_port, metrics_path)
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        httpd.server_close()
        log.info("Server stopped")
