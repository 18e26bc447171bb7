"""FastAPI server exposing the dashboard view engine.

Routes are organized into helper registration functions. Every request
that changes the view runs under one lock, so mutators and transport
events are applied one at a time, and each change is broadcast to the
WebSocket clients.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Callable

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import configure_logging, get_validated_config
from ..config_schema import AppConfig
from .api.websocket import ConnectionManager
from .collaborators import DashboardMetadataLoader, MetricsTransport, QueryBuilder
from .errors import ErrorCategory, MonitoringError, NoActiveDashboard
from .models.dashboard import SubscriptionResult
from .models.events import parse_event
from .models.view import DisplayState
from .models.window import BrushSelection
from .session import DashboardViewController, DashboardViewSession

logger = logging.getLogger(__name__)

_STATUS_BY_CATEGORY: dict[str, int] = {
    ErrorCategory.VALIDATION.value: 400,
    ErrorCategory.RESOURCE.value: 404,
    ErrorCategory.EXECUTION.value: 502,
    ErrorCategory.SYSTEM.value: 500,
}


# Request bodies


class ZoomRequest(BaseModel):
    """Brush selection in graph pixel-times (milliseconds)."""

    start_ms: float
    end_ms: float


class RangeRequest(BaseModel):
    """Absolute range in epoch seconds."""

    start: int
    end: int


class RelativeRequest(BaseModel):
    lookback_seconds: int


class CadenceRequest(BaseModel):
    """Refresh interval; null disables live refresh."""

    seconds: int | None = None


class FilterRequest(BaseModel):
    """Presentation filters; omitted fields are left unchanged."""

    panels: list[str] | None = None
    applications: list[str] | None = None
    events: list[str] | None = None
    event_overlay: bool | None = None


class EventIngestResponse(BaseModel):
    resubscribed: bool
    state: DisplayState


class DashboardServer:
    """Server-side state: the view controller plus connected clients."""

    def __init__(self, controller: DashboardViewController, config: AppConfig) -> None:
        self.controller = controller
        self.config = config
        self.connection_manager = ConnectionManager()
        self.lock = asyncio.Lock()

    def current_state(self) -> DisplayState | None:
        session = self.controller.session
        return session.display_state() if session is not None else None

    async def broadcast_state(self, state: DisplayState) -> None:
        await self.connection_manager.broadcast({
            "type": "view_update",
            "data": state.model_dump(),
        })

    async def mutate(self, change: Callable[[DashboardViewSession], Any]) -> DisplayState:
        """Apply a change to the active session and broadcast the result."""
        async with self.lock:
            session = self.controller.require_session()
            change(session)
            state = session.display_state()
        await self.broadcast_state(state)
        return state


def _register_error_handlers(app: FastAPI) -> None:
    """Map view engine errors to HTTP responses."""

    @app.exception_handler(MonitoringError)
    async def monitoring_error_handler(request: Request, exc: MonitoringError) -> JSONResponse:
        response = exc.to_response()
        status = _STATUS_BY_CATEGORY.get(response.category, 500)
        if status >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=status, content=response.to_dict())


def _register_dashboard_routes(app: FastAPI, server: DashboardServer) -> None:
    """Register dashboard selection routes."""

    @app.post("/api/dashboards/{dashboard_id}/select", response_model=DisplayState)
    async def select_dashboard(dashboard_id: str) -> DisplayState:
        """Open a fresh view for a dashboard."""
        async with server.lock:
            session = server.controller.select_dashboard(dashboard_id)
            state = session.display_state()
        await server.broadcast_state(state)
        return state

    @app.post("/api/dashboards/reload", response_model=DisplayState)
    async def reload_dashboard() -> DisplayState:
        """Reload the current dashboard definition and refetch."""
        async with server.lock:
            session = server.controller.reload_metadata()
            state = session.display_state()
        await server.broadcast_state(state)
        return state

    @app.get("/api/health")
    async def health() -> dict[str, Any]:
        """Active dashboard summary and client count."""
        return {
            **server.controller.describe(),
            "connections": server.connection_manager.connection_count,
        }


def _register_view_routes(app: FastAPI, server: DashboardServer) -> None:
    """Register view read and mutation routes."""

    @app.get("/api/view", response_model=DisplayState)
    async def get_view() -> DisplayState:
        state = server.current_state()
        if state is None:
            raise NoActiveDashboard("No dashboard selected")
        return state

    @app.get("/api/view/result", response_model=SubscriptionResult)
    async def get_result() -> SubscriptionResult:
        """Last fetched result, narrowed by the display filters."""
        return server.controller.require_session().displayed_result()

    @app.post("/api/view/zoom", response_model=DisplayState)
    async def zoom(body: ZoomRequest) -> DisplayState:
        brush = BrushSelection.from_pixel_times(body.start_ms, body.end_ms)
        return await server.mutate(lambda s: s.request_zoom(brush))

    @app.post("/api/view/range", response_model=DisplayState)
    async def set_range(body: RangeRequest) -> DisplayState:
        return await server.mutate(lambda s: s.request_absolute_range(body.start, body.end))

    @app.post("/api/view/relative", response_model=DisplayState)
    async def set_relative(body: RelativeRequest) -> DisplayState:
        return await server.mutate(lambda s: s.request_relative(body.lookback_seconds))

    @app.post("/api/view/cadence", response_model=DisplayState)
    async def set_cadence(body: CadenceRequest) -> DisplayState:
        return await server.mutate(lambda s: s.request_cadence(body.seconds))

    @app.post("/api/view/reset", response_model=DisplayState)
    async def reset() -> DisplayState:
        return await server.mutate(lambda s: s.reset_to_default())

    @app.post("/api/view/filters", response_model=DisplayState)
    async def set_filters(body: FilterRequest) -> DisplayState:
        return await server.mutate(
            lambda s: s.set_filters(
                panels=body.panels,
                applications=body.applications,
                events=body.events,
                event_overlay=body.event_overlay,
            )
        )


def _register_subscription_routes(app: FastAPI, server: DashboardServer) -> None:
    """Register the transport event intake.

    Transports that cannot call the session in-process post their
    data/complete/error events here.
    """

    @app.post("/api/subscription/events", response_model=EventIngestResponse)
    async def ingest_event(raw: dict[str, Any]) -> EventIngestResponse:
        event = parse_event(raw)
        async with server.lock:
            session = server.controller.require_session()
            resubscribed = session.handle_event(event)
            state = session.display_state()
        await server.broadcast_state(state)
        return EventIngestResponse(resubscribed=resubscribed, state=state)


def _register_websocket_routes(app: FastAPI, server: DashboardServer) -> None:
    """Register WebSocket endpoint streaming view updates."""

    @app.websocket(server.config.dashboard.websocket_path)
    async def websocket_endpoint(websocket: WebSocket) -> None:
        """WebSocket endpoint for real-time updates."""
        await server.connection_manager.connect(websocket)
        try:
            state = server.current_state()
            await websocket.send_json({
                "type": "initial_state",
                "data": state.model_dump() if state is not None else None,
            })

            # Keep connection alive and wait for messages
            timeout = server.config.dashboard.keepalive_seconds
            while True:
                try:
                    data = await asyncio.wait_for(websocket.receive_text(), timeout=timeout)
                    if data == "ping":
                        await websocket.send_text("pong")
                    else:
                        logger.debug("Received WebSocket message: %s", data[:100])
                except asyncio.TimeoutError:
                    await websocket.send_text("ping")

        except WebSocketDisconnect:
            logger.info("Client disconnected normally")
        finally:
            await server.connection_manager.disconnect(websocket)


def create_app(
    loader: DashboardMetadataLoader,
    query_builder: QueryBuilder,
    transport: MetricsTransport,
    config: AppConfig | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        loader: Dashboard metadata loader
        query_builder: Builds queries for a window and dashboard structure
        transport: Metrics subscription transport
        config: Validated config (defaults to the loaded config file)
    """
    cfg = config or get_validated_config()
    controller = DashboardViewController(loader, query_builder, transport, cfg)
    server = DashboardServer(controller, cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Lifespan context manager for startup/shutdown."""
        yield
        controller.close()

    app = FastAPI(
        title="Monitoring Dashboard View",
        description="Time window navigation and live metrics synchronization",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.dashboard.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.dashboard_server = server

    _register_error_handlers(app)
    _register_dashboard_routes(app, server)
    _register_view_routes(app, server)
    _register_subscription_routes(app, server)
    _register_websocket_routes(app, server)

    return app


def run_dashboard(
    loader: DashboardMetadataLoader,
    query_builder: QueryBuilder,
    transport: MetricsTransport,
    host: str | None = None,
    port: int | None = None,
    config: AppConfig | None = None,
) -> None:
    """Run the dashboard server."""
    import uvicorn

    cfg = config or get_validated_config()
    configure_logging(cfg)
    app = create_app(loader, query_builder, transport, cfg)
    uvicorn.run(
        app,
        host=host or cfg.dashboard.host,
        port=port or cfg.dashboard.port,
    )
