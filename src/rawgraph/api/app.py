"""FastAPI application exposing a RawGraph panel."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from rawgraph.api.schemas import (
    InspectorResponse,
    PanelStateResponse,
    SelectionRequest,
    SeriesModel,
    TimeRangeResponse,
    TooltipRequest,
    TooltipResponse,
    ZoomRequest,
)
from rawgraph.config import Settings, get_settings, load_panel_config, merge_panel_defaults
from rawgraph.metrics.observability import bind_correlation_id, clear_correlation_id, configure_logging, get_logger
from rawgraph.models import TimeRange
from rawgraph.render.boundary import SeriesPreparationFailed, prepare_series, tooltip_content
from rawgraph.retrieval.engine import HttpSearchEngine, SearchEngine
from rawgraph.services.events import PanelEvents
from rawgraph.services.panel import PanelController
from rawgraph.timerange.store import FilterStore, InMemoryFilterStore


@dataclass(frozen=True)
class AppDependencies:
    engine: SearchEngine
    store: FilterStore
    panel: PanelController


def _build_dependencies(settings: Settings) -> AppDependencies:
    config = load_panel_config(settings.panel_config_path) if settings.panel_config_path else merge_panel_defaults()
    events = PanelEvents()
    store = InMemoryFilterStore(events)
    engine = HttpSearchEngine(settings.elasticsearch_url, timeout=settings.search_timeout_seconds)
    panel = PanelController(
        engine,
        store,
        config,
        indices=settings.indices_tuple,
        events=events,
        base_url=settings.elasticsearch_url,
    )
    return AppDependencies(engine=engine, store=store, panel=panel)


def _panel_state(panel: PanelController) -> PanelStateResponse:
    accumulator = panel.accumulator
    series = accumulator.series
    preparation = prepare_series(series, panel.config)
    message = preparation.message if isinstance(preparation, SeriesPreparationFailed) else None
    return PanelStateResponse(
        token=accumulator.token,
        loading=accumulator.loading,
        hits=accumulator.hits,
        error=accumulator.error,
        series=[
            SeriesModel(label=s.label, color=s.color, hit_count=s.hit_count, points=s.as_pairs())
            for s in series
        ],
        message=message,
    )


def _time_range_response(time_range: TimeRange) -> TimeRangeResponse:
    return TimeRangeResponse(from_=time_range.from_, to=time_range.to)


def create_app(*, settings: Settings | None = None, dependencies: AppDependencies | None = None) -> FastAPI:
    settings = settings or get_settings()
    deps = dependencies or _build_dependencies(settings)

    configure_logging()
    logger = get_logger("api")

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        close = getattr(deps.engine, "aclose", None)
        if close is not None:
            await close()
            logger.info("engine.closed")

    app = FastAPI(title="RawGraph API", version="0.1.0", lifespan=lifespan)
    app.state.dependencies = deps

    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next):  # type: ignore[override]
        correlation_id = request.headers.get("X-Request-ID", uuid4().hex)
        request.state.correlation_id = correlation_id
        bind_correlation_id(correlation_id)
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers["X-Correlation-ID"] = correlation_id
        return response

    def require_api_key(request: Request) -> None:
        expected = settings.api_key
        if not expected:
            return
        provided = request.headers.get("X-API-Key")
        if provided != expected:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")

    class RateLimiter:
        def __init__(self, requests: int, window_seconds: int) -> None:
            self.requests = requests
            self.window = window_seconds
            self._buckets: dict[str, list[float]] = {}

        def __call__(self, request: Request) -> None:
            import time as _t

            client_ip = request.headers.get("x-forwarded-for") or (request.client.host if request.client else "-")
            key = f"{client_ip}:{request.url.path}"
            now = _t.time()
            bucket = self._buckets.setdefault(key, [])
            cutoff = now - self.window
            while bucket and bucket[0] < cutoff:
                bucket.pop(0)
            if len(bucket) >= self.requests:
                raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Rate limit exceeded")
            bucket.append(now)

    rate_limiter = RateLimiter(settings.rate_limit_requests, settings.rate_limit_window_seconds)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        correlation_id = getattr(request.state, "correlation_id", uuid4().hex)
        logger.error("unhandled.error", correlation_id=correlation_id, detail=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error", "correlation_id": correlation_id},
        )

    def get_dependencies(request: Request) -> AppDependencies:
        return request.app.state.dependencies

    def get_panel(dep: AppDependencies = Depends(get_dependencies)) -> PanelController:
        return dep.panel

    @app.post("/refresh", response_model=PanelStateResponse)
    async def refresh_panel(
        panel: PanelController = Depends(get_panel),
        _auth: None = Depends(require_api_key),
        _rl: None = Depends(rate_limiter),
    ) -> PanelStateResponse:
        await panel.refresh()
        return _panel_state(panel)

    @app.get("/series", response_model=PanelStateResponse)
    async def current_series(panel: PanelController = Depends(get_panel)) -> PanelStateResponse:
        return _panel_state(panel)

    @app.post("/zoom", response_model=TimeRangeResponse)
    async def zoom(
        payload: ZoomRequest,
        panel: PanelController = Depends(get_panel),
        _auth: None = Depends(require_api_key),
        _rl: None = Depends(rate_limiter),
    ) -> TimeRangeResponse:
        new_range = await panel.zoom(payload.factor)
        if new_range is None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No active time range to zoom")
        return _time_range_response(new_range)

    @app.post("/selection", response_model=TimeRangeResponse)
    async def select_range(
        payload: SelectionRequest,
        panel: PanelController = Depends(get_panel),
        _auth: None = Depends(require_api_key),
        _rl: None = Depends(rate_limiter),
    ) -> TimeRangeResponse:
        if not panel.config.interactive:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Panel is not interactive")
        selected = await panel.select_range(payload.from_ms, payload.to_ms)
        return _time_range_response(selected)

    @app.get("/inspector", response_model=InspectorResponse)
    async def inspector(panel: PanelController = Depends(get_panel)) -> InspectorResponse:
        if not panel.config.spyable or panel.inspector is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No request to inspect")
        return InspectorResponse(title=panel.inspector.title, body=panel.inspector.body)

    @app.post("/tooltip", response_model=TooltipResponse)
    async def tooltip(payload: TooltipRequest, panel: PanelController = Depends(get_panel)) -> TooltipResponse:
        content = tooltip_content(payload.color, payload.value, payload.epoch_ms, panel.config.timezone)
        return TooltipResponse(content=content)

    @app.get("/metrics")
    async def metrics() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    @app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        from rawgraph import __version__

        return {"status": "ok", "version": __version__, "environment": settings.environment}

    @app.head("/healthz")
    async def healthcheck_head() -> Response:
        return Response(status_code=status.HTTP_200_OK)

    @app.get("/livez")
    async def liveness() -> dict[str, str]:
        return {"status": "alive"}

    return app


app = create_app()
