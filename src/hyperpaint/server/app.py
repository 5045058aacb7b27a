"""FastAPI server exposing the projection studio over REST and WebSocket.

Provides:
- REST endpoints for projection controls, content, paint gestures and sessions
- WebSocket /ws/instances: stream visible per-category transforms at frame rate

A background frame thread plays the role of the display refresh: it advances
pending batched projection passes one chunk per tick.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from fastapi import Body, FastAPI, HTTPException, WebSocket, WebSocketDisconnect, status
from pydantic import BaseModel, Field

from hyperpaint import __version__
from hyperpaint.config import StudioSettings, get_settings
from hyperpaint.engine.studio import HyperspaceStudio
from hyperpaint.model import Category, Point4D
from hyperpaint.projection import PARAMETER_KEYS, PROJECTION_PRESETS, ProjectionMode
from hyperpaint.session import SessionImportError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable

logger = logging.getLogger(__name__)


class StudioState:
    """Thread-safe wrapper around a HyperspaceStudio.

    The core is single-threaded; this lock serializes request handlers and
    the frame thread so that only one of them touches the studio at a time.
    """

    def __init__(self, settings: StudioSettings | None = None) -> None:
        self.settings = settings if settings is not None else get_settings()
        self._studio = HyperspaceStudio.from_settings(self.settings)
        self._lock = threading.Lock()
        self._running = False
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self.frame = 0

    def run(self, action: Callable[[HyperspaceStudio], Any]) -> Any:
        """Run a callable against the studio while holding the lock."""
        with self._lock:
            return action(self._studio)

    def tick(self) -> bool:
        """Advance one host tick. Returns True when no pass is pending."""
        with self._lock:
            self.frame += 1
            return self._studio.step()

    def reset(self) -> None:
        """Replace the studio with a fresh one."""
        with self._lock:
            self._studio = HyperspaceStudio.from_settings(self.settings)
            self.frame = 0

    def start(self) -> None:
        """Start the background frame thread."""
        if self._running:
            return
        self._running = True
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._frame_loop, daemon=True)
        self._thread.start()
        logger.info("Frame thread started at %.0f fps", self.settings.frame_rate)

    def stop(self) -> None:
        """Stop the background frame thread."""
        if not self._running:
            return
        self._running = False
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
        logger.info("Frame thread stopped")

    def _frame_loop(self) -> None:
        interval = 1.0 / self.settings.frame_rate
        while self._running and not self._stop_event.is_set():
            self.tick()
            self._stop_event.wait(timeout=interval)


_studio_state: StudioState | None = None


def get_studio_state() -> StudioState:
    """Get or create the global studio state."""
    global _studio_state
    if _studio_state is None:
        _studio_state = StudioState()
    return _studio_state


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager: start/stop the frame thread."""
    state = get_studio_state()
    state.start()
    yield
    state.stop()


app = FastAPI(
    title="hyperpaint",
    description="4D-to-3D projection engine and spatial store",
    version=__version__,
    lifespan=lifespan,
)


# Request / response models


class StatsResponse(BaseModel):
    """Store statistics."""

    total_nodes: int = Field(description="Number of stored nodes")
    active_nodes: int = Field(description="Nodes within tolerance of the w-slice")
    stroke_count: int = Field(description="Number of stored strokes")
    average_kernel_coupling: float = Field(description="Mean kernelCoupling over all nodes")


class StudioStateResponse(BaseModel):
    """Summary of the studio."""

    projection_mode: str = Field(description="Active projection mode")
    w_slice: float = Field(description="Current w-slice coordinate")
    stats: StatsResponse = Field(description="Store statistics")
    pass_pending: bool = Field(description="Whether a batched projection pass is in flight")
    instance_counts: dict[str, int] = Field(description="Visible instances per category")
    capacity: int = Field(description="Instance slots per category")
    frame: int = Field(description="Host ticks since start")


class ParameterResponse(BaseModel):
    """One projection parameter and its safety band."""

    key: str
    value: float
    min: float
    max: float
    step: float
    level: str = Field(description="safe, warning or danger")
    reason: str = Field(default="", description="Validator message, if any")


class ParameterUpdate(BaseModel):
    value: float = Field(description="New parameter value (clamped to its range)")


class ModeRequest(BaseModel):
    mode: str = Field(description="slice, perspective, orthogonal or stereographic")


class SliceRequest(BaseModel):
    w: float = Field(description="New w-slice coordinate")


class NodeRequest(BaseModel):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0
    category: Category = Field(default=Category.AI, description="Consciousness type")
    properties: dict[str, Any] = Field(default_factory=dict)


class NodeResponse(BaseModel):
    id: str
    position: dict[str, float]
    category: str
    properties: dict[str, Any]


class PaintPoint(BaseModel):
    """A 3D pick point. The current w-slice is used as its w."""

    x: float
    y: float
    z: float


class PaintResponse(BaseModel):
    stroke_id: str | None = Field(default=None, description="Active or stored stroke id")
    placed: int = Field(default=0, description="Nodes placed by this call")
    points: int = Field(default=0, description="Samples recorded on the stroke")


class PresetResponse(BaseModel):
    key: str
    name: str
    mode: str
    params: dict[str, float]


class ImportResponse(BaseModel):
    nodes_imported: int
    strokes_imported: int
    skipped_nodes: int
    skipped_strokes: int
    ignored_params: list[str]


class ControlCommandResponse(BaseModel):
    success: bool = Field(description="Whether command succeeded")
    message: str = Field(description="Status message")


# Helpers


def _state_response(studio: HyperspaceStudio, frame: int) -> StudioStateResponse:
    stats = studio.store.stats
    return StudioStateResponse(
        projection_mode=studio.store.projection_mode.value,
        w_slice=studio.store.w_slice,
        stats=StatsResponse(**asdict(stats)),
        pass_pending=studio.scheduler.pending,
        instance_counts={c.value: n for c, n in studio.scheduler.active_instance_count.items()},
        capacity=studio.scheduler.capacity,
        frame=frame,
    )


def _parameter_responses(studio: HyperspaceStudio) -> list[ParameterResponse]:
    result = studio.validate()
    responses = []
    for key in PARAMETER_KEYS:
        param = studio.params[key]
        responses.append(
            ParameterResponse(
                key=key,
                value=param.value,
                min=param.min_val,
                max=param.max_val,
                step=param.step,
                level=result.level(key).value,
                reason=result.dangers.get(key) or result.warnings.get(key, ""),
            )
        )
    return responses


def _instances_to_dict(studio: HyperspaceStudio) -> dict[str, Any]:
    return {
        "mode": studio.store.projection_mode.value,
        "w_slice": studio.store.w_slice,
        "pending": studio.scheduler.pending,
        "instances": {
            category.value: [asdict(t) for t in buffer.visible()]
            for category, buffer in studio.scheduler.buffers.items()
        },
    }


# REST endpoints


@app.get("/api/state", response_model=StudioStateResponse, tags=["studio"])
async def get_state() -> StudioStateResponse:
    """Get the studio summary."""
    state = get_studio_state()
    return state.run(lambda studio: _state_response(studio, state.frame))


@app.get("/api/params", response_model=list[ParameterResponse], tags=["projection"])
async def get_params() -> list[ParameterResponse]:
    """Get all projection parameters with their safety bands."""
    return get_studio_state().run(_parameter_responses)


@app.put("/api/params/{key}", response_model=list[ParameterResponse], tags=["projection"])
async def set_param(key: str, update: ParameterUpdate) -> list[ParameterResponse]:
    """Set a projection parameter (clamped to its range) and re-project."""
    if key not in PARAMETER_KEYS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Parameter '{key}' not found",
        )

    def action(studio: HyperspaceStudio) -> list[ParameterResponse]:
        studio.set_param(key, update.value)
        return _parameter_responses(studio)

    return get_studio_state().run(action)


@app.get("/api/presets", response_model=list[PresetResponse], tags=["projection"])
async def get_presets() -> list[PresetResponse]:
    """List the projection presets."""
    return [
        PresetResponse(key=key, name=preset.name, mode=preset.mode, params=preset.params)
        for key, preset in PROJECTION_PRESETS.items()
    ]


@app.post("/api/presets/{name}", response_model=StudioStateResponse, tags=["projection"])
async def apply_preset(name: str) -> StudioStateResponse:
    """Apply a projection preset."""
    if name not in PROJECTION_PRESETS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Preset '{name}' not found",
        )
    state = get_studio_state()

    def action(studio: HyperspaceStudio) -> StudioStateResponse:
        studio.apply_preset(name)
        return _state_response(studio, state.frame)

    return state.run(action)


@app.post("/api/projection/mode", response_model=StudioStateResponse, tags=["projection"])
async def set_mode(request: ModeRequest) -> StudioStateResponse:
    """Switch projection mode. Unknown modes fall back to slice."""
    if ProjectionMode.parse(request.mode).value != request.mode.lower():
        logger.info("Unknown projection mode %r, falling back to slice", request.mode)
    state = get_studio_state()

    def action(studio: HyperspaceStudio) -> StudioStateResponse:
        studio.set_mode(request.mode)
        return _state_response(studio, state.frame)

    return state.run(action)


@app.post("/api/projection/slice", response_model=StudioStateResponse, tags=["projection"])
async def set_slice(request: SliceRequest) -> StudioStateResponse:
    """Move the w-slice."""
    state = get_studio_state()

    def action(studio: HyperspaceStudio) -> StudioStateResponse:
        studio.set_slice(request.w)
        return _state_response(studio, state.frame)

    return state.run(action)


@app.post("/api/nodes", response_model=NodeResponse, tags=["content"])
async def add_node(request: NodeRequest) -> NodeResponse:
    """Insert a node at a 4D position."""

    def action(studio: HyperspaceStudio) -> NodeResponse:
        node = studio.add_node(
            Point4D(request.x, request.y, request.z, request.w),
            request.category,
            request.properties,
        )
        return NodeResponse(
            id=node.id,
            position=node.position.as_dict(),
            category=node.category.value,
            properties=node.properties,
        )

    return get_studio_state().run(action)


@app.post("/api/paint/begin", response_model=PaintResponse, tags=["paint"])
async def paint_begin(point: PaintPoint) -> PaintResponse:
    """Start a paint gesture."""

    def action(studio: HyperspaceStudio) -> PaintResponse:
        stroke = studio.begin_stroke(point.x, point.y, point.z)
        return PaintResponse(stroke_id=stroke.id, placed=1, points=len(stroke.points))

    return get_studio_state().run(action)


@app.post("/api/paint/continue", response_model=PaintResponse, tags=["paint"])
async def paint_continue(point: PaintPoint) -> PaintResponse:
    """Add a sample to the active paint gesture. A no-op without one."""

    def action(studio: HyperspaceStudio) -> PaintResponse:
        placed = studio.continue_stroke(point.x, point.y, point.z)
        stroke = studio.gesture.stroke
        if stroke is None:
            return PaintResponse()
        return PaintResponse(stroke_id=stroke.id, placed=placed, points=len(stroke.points))

    return get_studio_state().run(action)


@app.post("/api/paint/end", response_model=PaintResponse, tags=["paint"])
async def paint_end() -> PaintResponse:
    """Finish the active paint gesture and store its stroke."""

    def action(studio: HyperspaceStudio) -> PaintResponse:
        stroke = studio.end_stroke()
        if stroke is None:
            return PaintResponse()
        return PaintResponse(stroke_id=stroke.id, points=len(stroke.points))

    return get_studio_state().run(action)


@app.get("/api/instances/{category}", tags=["render"])
async def get_instances(category: str) -> dict[str, Any]:
    """Get the visible transforms for one category."""
    try:
        cat = Category(category)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Category '{category}' not found",
        ) from e

    def action(studio: HyperspaceStudio) -> dict[str, Any]:
        buffer = studio.scheduler.buffers[cat]
        return {
            "category": cat.value,
            "count": buffer.count,
            "capacity": buffer.capacity,
            "transforms": [asdict(t) for t in buffer.visible()],
        }

    return get_studio_state().run(action)


@app.get("/api/session/export", tags=["session"])
async def export_session() -> dict[str, Any]:
    """Export the session document."""
    return get_studio_state().run(lambda studio: studio.export_session())


@app.post("/api/session/import", response_model=ImportResponse, tags=["session"])
async def import_session(document: Any = Body(...)) -> ImportResponse:  # noqa: B008
    """Import a session document, replacing the current content."""
    if not isinstance(document, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Session must be a JSON object, got {type(document).__name__}",
        )
    try:
        report = get_studio_state().run(lambda studio: studio.import_session(document))
    except SessionImportError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return ImportResponse(**asdict(report))


@app.post("/api/space/sample", response_model=ControlCommandResponse, tags=["content"])
async def load_sample() -> ControlCommandResponse:
    """Replace the content with the sample space."""
    nodes = get_studio_state().run(lambda studio: studio.load_sample())
    return ControlCommandResponse(success=True, message=f"Loaded {len(nodes)} sample nodes")


@app.post("/api/space/clear", response_model=ControlCommandResponse, tags=["content"])
async def clear_space() -> ControlCommandResponse:
    """Remove every node and stroke."""
    get_studio_state().run(lambda studio: studio.clear())
    logger.info("Space cleared")
    return ControlCommandResponse(success=True, message="Space cleared")


@app.websocket("/ws/instances")
async def websocket_instances(websocket: WebSocket) -> None:
    """Stream visible per-category transforms at the configured frame rate."""
    await websocket.accept()
    state = get_studio_state()
    interval = 1.0 / state.settings.frame_rate
    logger.info("Instance stream client connected")

    try:
        while True:
            start = asyncio.get_event_loop().time()
            await websocket.send_json(state.run(_instances_to_dict))
            elapsed = asyncio.get_event_loop().time() - start
            await asyncio.sleep(max(0.0, interval - elapsed))
    except WebSocketDisconnect:
        logger.info("Instance stream client disconnected")
    except Exception as e:
        logger.error("Instance streaming error: %s", str(e))


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
