"""Health check and unsubscribe-link HTTP endpoints.

Runs a small stdlib HTTP server in a background thread next to the bot:
- GET /health reports PostgreSQL and Redis connectivity
- GET /api/newsletter/unsubscribe?email=... backs the link in newsletter emails
"""

import asyncio
import html
import json
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import parse_qs, urlparse

from mealdeal import __version__
from mealdeal.logging import get_logger

logger = get_logger(__name__)

UNSUBSCRIBE_PATH = "/api/newsletter/unsubscribe"

_start_time: float = time.time()


@dataclass
class DependencyHealth:
    """Health status for a single dependency."""

    status: str  # "healthy" or "unhealthy"
    response_time_ms: int | None = None
    error: str | None = None


@dataclass
class HealthCheckResult:
    """Complete health check response."""

    status: str  # "healthy", "degraded", or "unhealthy"
    version: str
    uptime_seconds: int
    timestamp: str
    dependencies: dict[str, DependencyHealth] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        dependencies: dict[str, Any] = {}
        for name, dep in self.dependencies.items():
            dep_dict: dict[str, Any] = {"status": dep.status}
            if dep.response_time_ms is not None:
                dep_dict["response_time_ms"] = dep.response_time_ms
            if dep.error:
                dep_dict["error"] = dep.error
            dependencies[name] = dep_dict

        return {
            "status": self.status,
            "version": self.version,
            "uptime_seconds": self.uptime_seconds,
            "timestamp": self.timestamp,
            "dependencies": dependencies,
        }


async def check_dependency(name: str, probe: Callable[[], Awaitable[None]]) -> DependencyHealth:
    """Time one probe; any exception marks the dependency unhealthy."""
    start = time.perf_counter()
    try:
        await probe()
    except Exception as e:
        logger.error("health_check_failed", dependency=name, error=str(e))
        return DependencyHealth(status="unhealthy", error=f"Connection failed: {str(e)[:100]}")
    return DependencyHealth(
        status="healthy",
        response_time_ms=int((time.perf_counter() - start) * 1000),
    )


async def perform_health_check(db: Any = None, location_cache: Any = None) -> HealthCheckResult:
    """Check PostgreSQL and Redis.

    All dependencies down is "unhealthy", some down is "degraded".
    """
    result = HealthCheckResult(
        status="healthy",
        version=__version__,
        uptime_seconds=int(time.time() - _start_time),
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )

    if db is not None:
        result.dependencies["postgres"] = await check_dependency("postgres", db.ping)
    else:
        result.dependencies["postgres"] = DependencyHealth(status="unhealthy", error="Not configured")

    if location_cache is not None:
        result.dependencies["redis"] = await check_dependency("redis", location_cache.ping)
    else:
        result.dependencies["redis"] = DependencyHealth(status="unhealthy", error="Not configured")

    unhealthy = [name for name, dep in result.dependencies.items() if dep.status == "unhealthy"]
    if len(unhealthy) == len(result.dependencies):
        result.status = "unhealthy"
    elif unhealthy:
        result.status = "degraded"

    return result


def get_http_status_code(health_status: str) -> int:
    """503 when unhealthy, 200 otherwise."""
    if health_status == "unhealthy":
        return 503
    return 200


def render_unsubscribe_page(title: str, message: str) -> str:
    return (
        '<html><body style="font-family: Arial, sans-serif; text-align: center; padding: 50px;">'
        f"<h2>{html.escape(title)}</h2><p>{html.escape(message)}</p>"
        "</body></html>"
    )


class HealthCheckHandler(BaseHTTPRequestHandler):
    """HTTP handler; async work is scheduled on the bot's event loop."""

    db = None
    location_cache = None
    newsletter_service = None
    loop: asyncio.AbstractEventLoop | None = None

    def log_message(self, format: str, *args: Any) -> None:
        """Override to use structured logging."""
        logger.debug("health_http_request", message=format % args)

    def _run(self, coro) -> Any:
        if self.loop is None or self.loop.is_closed():
            coro.close()
            raise RuntimeError("Event loop unavailable")
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        try:
            return future.result(timeout=10)
        except Exception:
            future.cancel()
            raise

    def _send(self, status_code: int, body: str, content_type: str) -> None:
        self.send_response(status_code)
        self.send_header("Content-Type", content_type)
        self.send_header("Cache-Control", "no-cache")
        self.end_headers()
        self.wfile.write(body.encode("utf-8"))

    def do_GET(self) -> None:
        """Route GET requests."""
        url = urlparse(self.path)
        if url.path == "/health":
            self._handle_health()
        elif url.path == UNSUBSCRIBE_PATH:
            email = parse_qs(url.query).get("email", [None])[0]
            self._handle_unsubscribe(email)
        else:
            self._send(404, '{"error": "Not Found"}', "application/json")

    def _handle_health(self) -> None:
        try:
            result = self._run(perform_health_check(self.db, self.location_cache))
        except Exception as e:
            logger.error("health_check_error", error=str(e))
            result = HealthCheckResult(
                status="unhealthy",
                version=__version__,
                uptime_seconds=int(time.time() - _start_time),
                timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            )

        self._send(
            get_http_status_code(result.status),
            json.dumps(result.to_dict()),
            "application/json",
        )

    def _handle_unsubscribe(self, email: Optional[str]) -> None:
        if not email:
            self._send(
                400,
                render_unsubscribe_page(
                    "Invalid Request", "Email parameter is required for unsubscription."
                ),
                "text/html",
            )
            return

        if self.newsletter_service is None:
            self._send(503, render_unsubscribe_page("Unavailable", "Please try again later."), "text/html")
            return

        try:
            success, message = self._run(self.newsletter_service.unsubscribe(email))
        except Exception as e:
            logger.error("unsubscribe_link_failed", error=str(e))
            self._send(
                500,
                render_unsubscribe_page("Error", "Failed to unsubscribe. Please try again."),
                "text/html",
            )
            return

        if success:
            self._send(200, render_unsubscribe_page("Unsubscribed", message), "text/html")
        else:
            self._send(404, render_unsubscribe_page("Email Not Found", message), "text/html")


def start_health_server(
    host: str = "127.0.0.1",
    port: int = 8000,
    db: Any = None,
    location_cache: Any = None,
    newsletter_service: Any = None,
    loop: asyncio.AbstractEventLoop | None = None,
) -> HTTPServer:
    """Create the HTTP server; the caller runs serve_forever in a thread.

    Args:
        host: Host to bind to
        port: Port to listen on
        db: Database instance for health checks
        location_cache: LocationCache used to probe Redis
        newsletter_service: Service backing the unsubscribe link
        loop: Event loop used to execute async work

    Returns:
        HTTPServer instance
    """
    HealthCheckHandler.db = db
    HealthCheckHandler.location_cache = location_cache
    HealthCheckHandler.newsletter_service = newsletter_service
    HealthCheckHandler.loop = loop or asyncio.get_event_loop()

    server = HTTPServer((host, port), HealthCheckHandler)
    logger.info("health_server_started", host=host, port=port)
    return server


def reset_start_time() -> None:
    """Reset start time for testing purposes."""
    global _start_time
    _start_time = time.time()
