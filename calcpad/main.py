"""
FastAPI entrypoint for the calcpad service.
"""
import json
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from .config import (
    EVENT_RATE_LIMIT, MAX_EVENTS_PER_REPLAY, MAX_SESSIONS,
    SLOW_REQUEST_THRESHOLD_MS, LOG_FILE, LOG_MAX_BYTES, LOG_BACKUP_COUNT,
)
from .display import render
from .evaluator import Operation, evaluate
from .formatter import format_operand, policy_from_config
from .sessions import SessionLimitError, SessionNotFoundError, get_session_store
from .state import (
    AddDigit, CalculatorState, ChooseOperation, Clear, DeleteDigit, Evaluate,
    InputEvent, replay,
)

# Attributes present on every LogRecord, excluded from the JSON extras dict
_LOG_RECORD_BUILTIN_ATTRS = {
    'args', 'asctime', 'created', 'exc_info', 'exc_text', 'filename',
    'funcName', 'levelname', 'levelno', 'lineno', 'message', 'module',
    'msecs', 'msg', 'name', 'pathname', 'process', 'processName',
    'relativeCreated', 'stack_info', 'thread', 'threadName', 'taskName',
}


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON for machine-readable file output."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        # Merge any extra={} fields passed by the caller
        for key, val in record.__dict__.items():
            if key not in _LOG_RECORD_BUILTIN_ATTRS and key not in entry:
                entry[key] = val
        return json.dumps(entry, default=str)


_console_handler = logging.StreamHandler()
_console_handler.setFormatter(
    logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
)

# JSON file output, rotated at LOG_MAX_BYTES
_file_handler = RotatingFileHandler(
    LOG_FILE, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT,
    encoding='utf-8', delay=True
)
_file_handler.setFormatter(JSONFormatter())

logging.basicConfig(level=logging.INFO, handlers=[_console_handler, _file_handler])
logger = logging.getLogger(__name__)

GROUPING_POLICY = policy_from_config()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    logger.info(
        f"Starting calcpad (max_sessions={MAX_SESSIONS}, "
        f"separator={GROUPING_POLICY.thousands_separator!r}, "
        f"decimal_point={GROUPING_POLICY.decimal_point!r})"
    )
    yield
    get_session_store().clear()


limiter = Limiter(key_func=get_remote_address)

app = FastAPI(
    title="calcpad",
    description="Interactive calculator sessions driven by discrete input events",
    version="1.0.0",
    lifespan=lifespan
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every HTTP request with method, path, status code, and duration."""
    start_time = time.time()
    response = await call_next(request)
    duration_ms = round((time.time() - start_time) * 1000, 2)
    extra = {
        "method": request.method,
        "path": request.url.path,
        "status_code": response.status_code,
        "duration_ms": duration_ms,
    }
    message = f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)"
    if duration_ms > SLOW_REQUEST_THRESHOLD_MS:
        logger.warning(f"Slow request: {message}", extra=extra)
    else:
        logger.info(message, extra=extra)
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Input event wire models, discriminated on "type"
class AddDigitEvent(BaseModel):
    type: Literal["add-digit"]
    digit: str = Field(..., pattern=r"^[0-9.]$", description="A digit or the decimal point")


class ChooseOperationEvent(BaseModel):
    type: Literal["choose-operation"]
    operation: Operation


class ClearEvent(BaseModel):
    type: Literal["clear"]


class DeleteDigitEvent(BaseModel):
    type: Literal["delete-digit"]


class EvaluateEvent(BaseModel):
    type: Literal["evaluate"]


EventPayload = Annotated[
    Union[AddDigitEvent, ChooseOperationEvent, ClearEvent, DeleteDigitEvent, EvaluateEvent],
    Field(discriminator="type"),
]


def to_input_event(payload: EventPayload) -> InputEvent:
    """Convert a validated wire event into a core input event."""
    if isinstance(payload, AddDigitEvent):
        return AddDigit(payload.digit)
    if isinstance(payload, ChooseOperationEvent):
        return ChooseOperation(payload.operation)
    if isinstance(payload, ClearEvent):
        return Clear()
    if isinstance(payload, DeleteDigitEvent):
        return DeleteDigit()
    return Evaluate()


# Request/Response models
class DispatchRequest(BaseModel):
    """Request model for dispatching one event to a session."""
    event: EventPayload


class ReplayRequest(BaseModel):
    """Request model for the stateless replay endpoint."""
    events: List[EventPayload] = Field(..., max_length=MAX_EVENTS_PER_REPLAY)


class EvaluateRequest(BaseModel):
    """Request model for the evaluate endpoint."""
    previous_operand: str
    operation: str
    current_operand: str


class EvaluateResponse(BaseModel):
    result: str


class FormatRequest(BaseModel):
    """Request model for the format endpoint."""
    operand: Optional[str] = Field(None, description="Raw operand text; null renders nothing")


class FormatResponse(BaseModel):
    display: Optional[str]


class StateModel(BaseModel):
    """Calculator state as seen by clients."""
    current_operand: Optional[str]
    previous_operand: Optional[str]
    operation: Optional[str]
    overwrite: bool


class DisplayModel(BaseModel):
    previous_line: str
    current_line: str


class CalculatorResponse(BaseModel):
    """State plus its two rendered display lines."""
    state: StateModel
    display: DisplayModel


class SessionResponse(CalculatorResponse):
    session_id: str


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str
    active_sessions: int
    max_sessions: int
    max_events_per_replay: int


def _describe(state: CalculatorState) -> CalculatorResponse:
    display = render(state, GROUPING_POLICY)
    return CalculatorResponse(
        state=StateModel(
            current_operand=state.current_operand,
            previous_operand=state.previous_operand,
            operation=state.operation.value if state.operation is not None else None,
            overwrite=state.overwrite,
        ),
        display=DisplayModel(
            previous_line=display.previous_line,
            current_line=display.current_line,
        ),
    )


def _session_response(session_id: str, state: CalculatorState) -> SessionResponse:
    described = _describe(state)
    return SessionResponse(session_id=session_id, state=described.state, display=described.display)


# Endpoints
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    stats = get_session_store().get_stats()
    return HealthResponse(
        status="healthy",
        active_sessions=stats["active_sessions"],
        max_sessions=stats["max_sessions"],
        max_events_per_replay=MAX_EVENTS_PER_REPLAY,
    )


@app.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session():
    """Open a calculator session in the empty state."""
    store = get_session_store()
    try:
        session_id = store.create()
    except SessionLimitError as e:
        logger.warning(f"Session rejected: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    return _session_response(session_id, store.get(session_id))


@app.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str):
    """Current state and display of a session."""
    try:
        state = get_session_store().get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _session_response(session_id, state)


@app.post("/sessions/{session_id}/events", response_model=SessionResponse)
@limiter.limit(EVENT_RATE_LIMIT)
async def dispatch_event(request: Request, session_id: str, body: DispatchRequest):
    """
    Apply one input event to a session.

    Returns the session's new state and display.
    """
    event = to_input_event(body.event)
    try:
        state = get_session_store().dispatch(session_id, event)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(f"[{session_id}] Event dispatch failed",
                         extra={"session_id": session_id, "event": body.event.type})
        raise HTTPException(status_code=500, detail=f"Event dispatch failed: {e}")
    return _session_response(session_id, state)


@app.delete("/sessions/{session_id}")
async def close_session(session_id: str):
    """Close a session."""
    try:
        get_session_store().close(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": f"Session {session_id} closed"}


@app.post("/replay", response_model=CalculatorResponse)
@limiter.limit(EVENT_RATE_LIMIT)
async def replay_events(request: Request, body: ReplayRequest):
    """
    Fold a list of events from the empty state without opening a session.
    """
    state = replay(to_input_event(payload) for payload in body.events)
    logger.info(f"Replayed {len(body.events)} events", extra={"event_count": len(body.events)})
    return _describe(state)


@app.post("/evaluate", response_model=EvaluateResponse)
async def evaluate_endpoint(body: EvaluateRequest):
    """Evaluate a single binary expression."""
    return EvaluateResponse(
        result=evaluate(body.previous_operand, body.operation, body.current_operand)
    )


@app.post("/format", response_model=FormatResponse)
async def format_endpoint(body: FormatRequest):
    """Format an operand for display using the configured grouping."""
    return FormatResponse(display=format_operand(body.operand, GROUPING_POLICY))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
