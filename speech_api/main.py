from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from speech_api import __version__
from speech_api.config import Settings, get_settings
from speech_api.dependencies import build_services
from speech_api.middleware.logging import LoggingMiddleware
from speech_api.middleware.request_id import RequestIDMiddleware
from speech_api.routers import health, history, speech, voices
from speech_api.services import db_client
from speech_api.services.http_client import close_http_client
from speech_api.telemetry.logging import configure_logging
from speech_api.telemetry.tracing import configure_tracing

settings = get_settings()

configure_logging(settings.log_level, json_output=settings.env != "development")
configure_tracing(settings)


def create_app(settings: Settings) -> FastAPI:
    app = FastAPI(
        title="Speech API",
        version=settings.stack_version or __version__,
        default_response_class=ORJSONResponse,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(LoggingMiddleware)

    instrumentator = Instrumentator(should_group_status_codes=True)
    instrumentator.instrument(app).expose(app, include_in_schema=False)

    app.include_router(health.router)
    app.include_router(speech.router)
    app.include_router(voices.router)
    app.include_router(history.router)

    @app.on_event("startup")
    async def startup_event() -> None:
        app.state.services = await build_services(settings)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        app.state.services = None
        await close_http_client()
        await db_client.close_db_pool()

    return app


app = create_app(settings)
