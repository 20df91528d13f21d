"""
FastAPI application factory for the Region 1 project data service.

Usage:
    python -m api.app                        # Dev server on port 5000
    APP_DB_PATH=/data/projects.sqlite python -m api.app

OpenAPI docs available at http://localhost:5000/docs after starting.

The service is read-only: it serves the geocoded project list, province
list and summary statistics that the dashboard loads at startup.

- Structured JSON logging when APP_LOG_FORMAT=json.
- CORS middleware with configurable origins via APP_CORS_ORIGINS.
- Every response carries an X-Request-ID header matching its log line.
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.database import get_db_path
from api.routes import projects, reference
from utils.config import AppConfig

# ── Configuration ─────────────────────────────────────────────────────────────
_cfg = AppConfig.from_env()

# ── Structured JSON logging ───────────────────────────────────────────────────


class _JsonFormatter(logging.Formatter):
    """Emit log records as newline-delimited JSON."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Merge extra fields added via logger.info("...", extra={...})
        for key in ("method", "path", "status", "duration_ms", "client_ip",
                    "request_id"):
            if hasattr(record, key):
                data[key] = getattr(record, key)
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data)


def configure_logging(log_format: str = "text", level: int = logging.INFO) -> None:
    """Install a single stream handler on the root logger."""
    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
    logging.basicConfig(handlers=[handler], level=level, force=True)


_logger = logging.getLogger("region1_projects_api")
configure_logging(_cfg.log_format)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the active settings and warn if the database has not been built yet."""
    _logger.info("Starting with settings %s", _cfg.to_dict())
    db_path = get_db_path()
    if not db_path.exists():
        _logger.warning(
            "Database not found at %s. Run 'python build_project_db.py' first.",
            db_path,
        )
    yield


def create_app(db_path: Path | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        db_path: Override the database path (useful for testing).

    Returns:
        Configured FastAPI application instance.
    """
    if db_path is not None:
        import api.database as _db_mod
        _db_mod._DB_PATH = Path(db_path)

    app = FastAPI(
        title="Region 1 Projects API",
        summary="Read-only access to geocoded assistance projects in Region 1 (Ilocos).",
        description=(
            "## Region 1 Projects API\n\n"
            "Serves the assistance projects shown on the regional map "
            "dashboard. Every project is joined with its firm, and only "
            "firms with coordinates are returned.\n\n"
            "- **Provinces**: Ilocos Norte, Ilocos Sur, La Union, Pangasinan.\n"
            "- **Statuses**: Completed, Ongoing, Processing, Terminated.\n"
            "- **Amounts** are in Philippine pesos."
        ),
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {
                "name": "projects",
                "description": "Geocoded project lists, by province, by status, or by text search.",
            },
            {
                "name": "reference",
                "description": "Province list, summary statistics and health check.",
            },
        ],
    )

    # ── CORS middleware ───────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cfg.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "HEAD", "OPTIONS"],
        allow_headers=["*"],
    )

    # ── Request logging middleware ────────────────────────────────────────────

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log each request with its duration and tag it with a request id."""
        request_id = str(uuid.uuid4())[:8]
        start = time.monotonic()
        client_ip = request.client.host if request.client else "unknown"
        path = request.url.path

        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000
        response.headers["X-Request-ID"] = request_id

        if _cfg.log_format == "json":
            _logger.info(
                "request",
                extra={
                    "method": request.method,
                    "path": path,
                    "status": response.status_code,
                    "duration_ms": round(duration_ms, 1),
                    "client_ip": client_ip,
                    "request_id": request_id,
                },
            )
        else:
            _logger.info(
                "method=%s path=%s status=%d duration_ms=%.1f ip=%s rid=%s",
                request.method, path, response.status_code, duration_ms,
                client_ip, request_id,
            )
        return response

    # ── Error handling ────────────────────────────────────────────────────────

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Catch unhandled exceptions and return JSON instead of HTML traceback."""
        _logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc),
                "status_code": 500,
            },
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(
            status_code=400,
            content={"error": "Bad request", "detail": str(exc), "status_code": 400},
        )

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(projects.router, prefix="/api")
    app.include_router(reference.router, prefix="/api")

    return app


# Module-level app instance for uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.app:app", host=_cfg.api_host, port=_cfg.api_port, reload=True)
