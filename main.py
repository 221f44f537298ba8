from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
import logging
from typing import Callable, Dict, Optional, Tuple
from prometheus_client import Counter, start_http_server
import structlog

from person import Person
from settings import Settings, get_settings


GREETING = "hello world"
FIRST_NAME = "Henry"
LAST_NAME = "Xiloj"

request_count = Counter("demo_requests_total", "Requests served", ["service", "route"])
UNMATCHED_ROUTE = "unmatched"
_exporter_ports = set()

logger = structlog.get_logger()


def configure_logging(level: str = "INFO", json_logs: bool = True):
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_logs:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
    )


# === Handlers ===
def hello():
    return PlainTextResponse(GREETING)


def user() -> Person:
    return Person(first_name=FIRST_NAME, last_name=LAST_NAME)


ROUTES: Dict[Tuple[str, str], Callable] = {
    ("GET", "/hello"): hello,
    ("GET", "/user"): user,
}


def register_routes(app: FastAPI, routes: Dict[Tuple[str, str], Callable] = ROUTES):
    for (method, path), handler in routes.items():
        app.add_api_route(path, handler, methods=[method])


def start_metrics_exporter(port: int):
    if port in _exporter_ports:
        return
    start_http_server(port)
    _exporter_ports.add(port)


def route_label(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


# === App Factory ===
def create_app(service_name: str, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)

    app = FastAPI(title=service_name)

    # === Startup ===
    @app.on_event("startup")
    async def on_startup():
        if settings.metrics_port:
            start_metrics_exporter(settings.metrics_port)
        logger.info(
            "service_started",
            service=service_name,
            routes=[f"{method} {path}" for method, path in ROUTES],
            metrics_port=settings.metrics_port,
        )

    # === Logging and Counting ===
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        try:
            response = await call_next(request)
        except Exception:
            # the 500 body itself is written later by unhandled_error
            logger.info(
                "request_log",
                service=service_name,
                path=request.url.path,
                method=request.method,
                status=500,
            )
            raise
        logger.info(
            "request_log",
            service=service_name,
            path=request.url.path,
            method=request.method,
            status=response.status_code,
        )
        return response

    @app.middleware("http")
    async def count_requests(request: Request, call_next):
        # route label is the matched template; unmatched paths share one series
        try:
            return await call_next(request)
        finally:
            request_count.labels(service=service_name, route=route_label(request)).inc()

    # === Errors ===
    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.error(
            "request_failed",
            service=service_name,
            path=request.url.path,
            method=request.method,
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})

    register_routes(app)
    return app
