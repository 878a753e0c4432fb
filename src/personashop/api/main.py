"""FastAPI application exposing the personalization engine to the storefront."""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from personashop import __version__
from personashop.behavior import BehaviorEvent, EventKind
from personashop.config import EngineConfig, configure_logging
from personashop.engine import PersonalizationEngine, PersonalizationState
from personashop.personas import PERSONA_INFO
from personashop.preferences import FeedbackEvent, FeedbackKind, FeedbackTarget


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    services: dict[str, bool]


class StateResponse(BaseModel):
    """Published personalization state."""

    persona: str
    persona_label: str
    persona_description: str
    scores: dict[str, float]
    preferences: dict[str, Any]
    behavior: dict[str, Any]
    is_loading: bool


class EventRequest(BaseModel):
    """Interaction event reported by the storefront."""

    kind: EventKind
    value: str | float | None = None


class FeedbackRequest(BaseModel):
    """User feedback on the presentation."""

    kind: FeedbackKind
    target: FeedbackTarget
    message: str | None = None


class PreferenceRequest(BaseModel):
    """Manual value for one preference field."""

    value: bool | str


def _state_response(state: PersonalizationState) -> StateResponse:
    info = PERSONA_INFO[state.persona]
    data = state.to_dict()
    return StateResponse(
        persona=data["persona"],
        persona_label=info.label,
        persona_description=info.description,
        scores=data["scores"],
        preferences=data["preferences"],
        behavior=data["behavior"],
        is_loading=data["is_loading"],
    )


def create_app(config: EngineConfig | None = None) -> FastAPI:
    """Build the API around a single engine whose lifetime follows the app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        engine_config = config or EngineConfig()
        configure_logging(engine_config.log_level)
        async with PersonalizationEngine(config=engine_config) as engine:
            app.state.engine = engine
            yield

    app = FastAPI(
        title="Personashop API",
        description="Persona-driven storefront personalization",
        version=__version__,
        lifespan=lifespan,
    )

    def get_engine(request: Request) -> PersonalizationEngine:
        return request.app.state.engine

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with API information."""
        return {
            "name": "Personashop API",
            "version": __version__,
            "docs": "/docs",
            "health": "/api/v1/health",
        }

    @app.get("/api/v1/health", response_model=HealthResponse)
    async def health_check(request: Request) -> HealthResponse:
        """
        Health check endpoint.

        Reports "degraded" when the classifier fell back to uniform scores.
        """
        engine = get_engine(request)
        classifier_ready = engine.classifier.is_ready
        return HealthResponse(
            status="ok" if (engine.is_running and classifier_ready) else "degraded",
            version=__version__,
            services={
                "engine": engine.is_running,
                "classifier": classifier_ready,
            },
        )

    @app.get("/api/v1/state", response_model=StateResponse)
    async def get_state(request: Request) -> StateResponse:
        """Current persona, scores, preferences and behavior."""
        return _state_response(get_engine(request).state)

    @app.post("/api/v1/events", response_model=StateResponse)
    async def record_event(request: Request, body: EventRequest) -> StateResponse:
        """Record one interaction event."""
        engine = get_engine(request)
        try:
            event = BehaviorEvent(body.kind, body.value)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        engine.record_event(event)
        return _state_response(engine.state)

    @app.post("/api/v1/feedback", response_model=StateResponse)
    async def submit_feedback(request: Request, body: FeedbackRequest) -> StateResponse:
        """Submit feedback; preferences adjust immediately."""
        engine = get_engine(request)
        engine.submit_feedback(FeedbackEvent(body.kind, body.target, body.message))
        return _state_response(engine.state)

    @app.put("/api/v1/preferences/{field_name}", response_model=StateResponse)
    async def set_preference(
        request: Request, field_name: str, body: PreferenceRequest
    ) -> StateResponse:
        """Override one preference field until reset."""
        engine = get_engine(request)
        try:
            engine.set_manual_preference(field_name, body.value)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return _state_response(engine.state)

    @app.post("/api/v1/reevaluate", response_model=StateResponse)
    async def reevaluate(request: Request) -> StateResponse:
        """Recompute the persona from current behavior."""
        state = await get_engine(request).reevaluate()
        return _state_response(state)

    @app.post("/api/v1/reset", response_model=StateResponse)
    async def reset(request: Request) -> StateResponse:
        """Forget all behavior, feedback and overrides."""
        return _state_response(get_engine(request).reset())

    return app


app = create_app()
