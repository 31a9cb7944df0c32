"""
FastAPI WebSocket Message Relay
Password/origin-gated fan-out with keepalive supervision
"""

import asyncio
import os
import time
from contextlib import asynccontextmanager
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request, WebSocket
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles

from relay import (
    FastAPIConnection,
    RelayServer,
    Settings,
    configure_logging,
    get_logger,
    log_security_event,
    log_system_event,
    settings,
)

logger = get_logger()


def create_app(
    app_settings: Settings,
    relay: Optional[RelayServer] = None,
    include_http: bool = True,
    include_websocket: bool = True,
) -> FastAPI:
    """
    Build the relay application

    Args:
        app_settings: Relay configuration
        relay: Shared relay; a new one is created when omitted
        include_http: Serve the HTTP routes and static files
        include_websocket: Serve the relay WebSocket routes

    Returns:
        Configured FastAPI application
    """
    configure_logging(app_settings.LOG_LEVEL)
    relay = relay or RelayServer(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management"""
        log_system_event("startup", f"Message relay starting in {app_settings.APP_ENV} mode")
        yield
        await relay.shutdown()
        log_system_event("shutdown", "Message relay shutting down")

    app = FastAPI(
        title="WebSocket Message Relay",
        description="Authenticated real-time fan-out over WebSockets",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.relay = relay

    if include_websocket:
        @app.websocket("/ws")
        @app.websocket("/")
        async def relay_endpoint(websocket: WebSocket):
            """Relay WebSocket endpoint: one session per connection"""
            connection = FastAPIConnection(websocket)
            await connection.accept()
            await relay.serve(connection)

    if include_http:
        @app.get("/health")
        async def health_check():
            """Health check endpoint"""
            try:
                return {
                    "status": "healthy",
                    "timestamp": time.time(),
                    "connections": await relay.get_stats(),
                }
            except Exception as e:
                logger.error(f"Health check failed: {e}")
                raise HTTPException(status_code=503, detail="Service unavailable")

        @app.get("/stats")
        async def get_stats():
            """Get relay statistics"""
            return {
                "server": "WebSocket Message Relay",
                "environment": app_settings.APP_ENV,
                "timestamp": time.time(),
                "connections": await relay.get_stats(),
            }

        if os.path.isdir(app_settings.STATIC_DIR):
            app.mount("/", StaticFiles(directory=app_settings.STATIC_DIR, html=True), name="static")
        else:
            @app.get("/")
            async def root():
                return PlainTextResponse("Hello World!")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler"""
        logger.error(f"Unhandled exception: {exc}")
        log_security_event("unhandled_exception", {
            "path": str(request.url),
            "error": str(exc),
        })
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    return app


def build_servers(app_settings: Settings) -> List[uvicorn.Server]:
    """
    Select the transport layout for the configured environment

    Production attaches the WebSocket routes to the HTTP server; development
    serves them from a separate port. Both layouts share one relay.
    """
    relay = RelayServer(app_settings)
    ssl_options = {
        "ssl_keyfile": app_settings.SSL_KEYFILE,
        "ssl_certfile": app_settings.SSL_CERTFILE,
    }

    if app_settings.is_production:
        apps = [(create_app(app_settings, relay), app_settings.PORT)]
    else:
        apps = [
            (create_app(app_settings, relay, include_websocket=False), app_settings.PORT),
            (create_app(app_settings, relay, include_http=False), app_settings.DEV_WS_PORT),
        ]

    return [
        uvicorn.Server(uvicorn.Config(
            application,
            host=app_settings.APP_HOST,
            port=port,
            log_level=app_settings.LOG_LEVEL.lower(),
            access_log=True,
            # Liveness is handled by the relay's own ping/pong
            ws_ping_interval=None,
            **ssl_options,
        ))
        for application, port in apps
    ]


async def serve(app_settings: Settings):
    servers = build_servers(app_settings)
    log_system_event(
        "listening",
        f"ports={[server.config.port for server in servers]} env={app_settings.APP_ENV}",
    )
    await asyncio.gather(*(server.serve() for server in servers))


app = create_app(settings)

if __name__ == "__main__":
    logger.info("Starting WebSocket Message Relay...")
    asyncio.run(serve(settings))
