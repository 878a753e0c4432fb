"""Personalization engine: owns behavior, classifier and published preferences."""

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from personashop.behavior import BehaviorEvent, BehaviorProfile, BehaviorStore, normalize
from personashop.config import EngineConfig
from personashop.observers import SubscriberList, Unsubscribe
from personashop.personas import (
    DEFAULT_PERSONA,
    UNIFORM_SCORES,
    PersonaClassifier,
    PersonaLabel,
    PersonaScores,
)
from personashop.personas.models import scores_to_dict
from personashop.preferences import (
    DEFAULT_PREFERENCES,
    FeedbackEvent,
    ManualOverride,
    PreferenceBundle,
    apply_adjustments,
    apply_feedback,
    map_persona,
)
from personashop.preferences.feedback import Adjustment
from personashop.storage import FileKeyValueStore, InMemoryKeyValueStore, KeyValueStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersonalizationState:
    """Everything the presentation layer reads from the engine."""

    persona: PersonaLabel
    scores: PersonaScores
    preferences: PreferenceBundle
    behavior: BehaviorProfile
    is_loading: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert state to a JSON-friendly dict."""
        return {
            "persona": self.persona.value,
            "scores": scores_to_dict(self.scores),
            "preferences": self.preferences.to_dict(),
            "behavior": self.behavior.to_dict(),
            "is_loading": self.is_loading,
        }


class PersonalizationEngine:
    """Adapts storefront preferences to the visitor's inferred persona.

    One engine serves one visitor session and is driven from a single asyncio
    event loop. Re-evaluations are serialized and publish in the order they
    were requested; every other operation is synchronous.

    Usage:
        async with PersonalizationEngine() as engine:
            engine.subscribe(render)
            engine.record_event(BehaviorEvent.price_filter_used())
            await engine.reevaluate()
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        storage: KeyValueStore | None = None,
        session_storage: KeyValueStore | None = None,
        classifier: PersonaClassifier | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize personalization engine.

        Args:
            config: Engine configuration (loaded from the environment if None)
            storage: Durable store for the behavior profile (derived from
                ``config.storage_dir`` if None)
            session_storage: Transient store for the session marker
            classifier: Persona classifier (built from config if None)
            clock: Monotonic clock used for time-on-page tracking
        """
        self.config = config or EngineConfig()

        if storage is None:
            if self.config.storage_dir is not None:
                storage = FileKeyValueStore(self.config.storage_dir)
            else:
                storage = InMemoryKeyValueStore()

        self.behavior_store = BehaviorStore(
            storage=storage,
            session_storage=session_storage,
            behavior_key=self.config.behavior_key,
            session_key=self.config.session_key,
        )
        self.classifier = classifier or PersonaClassifier.from_config(self.config)

        self._persona: PersonaLabel = DEFAULT_PERSONA
        self._scores: PersonaScores = UNIFORM_SCORES
        self._preferences: PreferenceBundle = DEFAULT_PREFERENCES
        self._adjustments: list[Adjustment] = []

        self._subscribers: SubscriberList[PersonalizationState] = SubscriberList()
        self._reevaluate_lock = asyncio.Lock()
        self._pending_reevaluations = 0
        # Bumped by reset() so re-evaluations requested earlier are discarded
        self._generation = 0

        self._clock = clock
        self._started_at: float | None = None
        self._tasks: list[asyncio.Task[None]] = []
        self._started = False
        self._closed = False

    async def __aenter__(self) -> "PersonalizationEngine":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.stop()

    # Lifecycle

    @property
    def is_running(self) -> bool:
        """True between start() and stop()."""
        return self._started and not self._closed

    async def start(self) -> None:
        """Train the classifier, publish a first evaluation and start the timers."""
        if self._started or self._closed:
            return
        self._started = True
        self._started_at = self._clock()

        # Loading from start until the first evaluation is published
        self._pending_reevaluations += 1
        try:
            await self.classifier.initialize()
        finally:
            self._pending_reevaluations -= 1
        await self.reevaluate()

        if self._closed:
            return

        if self.config.reevaluate_interval_seconds > 0:
            self._tasks.append(asyncio.create_task(self._reevaluate_periodically()))
        if self.config.time_tick_seconds > 0:
            self._tasks.append(asyncio.create_task(self._track_time_on_page()))

        logger.info(
            "Personalization engine started (re-evaluating every %.0fs)",
            self.config.reevaluate_interval_seconds,
        )

    async def stop(self) -> None:
        """Cancel timers and stop publishing. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._subscribers.clear()

        current = asyncio.current_task()
        tasks = [task for task in self._tasks if task is not current]
        self._tasks = []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

        logger.info("Personalization engine stopped")

    async def _reevaluate_periodically(self) -> None:
        while not self._closed:
            await asyncio.sleep(self.config.reevaluate_interval_seconds)
            try:
                await self.reevaluate()
            except Exception:
                logger.exception("Periodic re-evaluation failed")

    async def _track_time_on_page(self) -> None:
        while not self._closed:
            await asyncio.sleep(self.config.time_tick_seconds)
            self.record_event(BehaviorEvent.time_on_page(self.elapsed_seconds))

    @property
    def elapsed_seconds(self) -> float:
        """Seconds since start() (0 before start)."""
        if self._started_at is None:
            return 0.0
        return max(self._clock() - self._started_at, 0.0)

    # Queries

    @property
    def state(self) -> PersonalizationState:
        """Currently published state."""
        return PersonalizationState(
            persona=self._persona,
            scores=self._scores,
            preferences=self._preferences,
            behavior=self.behavior_store.snapshot(),
            is_loading=self._pending_reevaluations > 0,
        )

    def get_persona(self) -> PersonaLabel:
        return self._persona

    def get_persona_scores(self) -> PersonaScores:
        return self._scores

    def get_preferences(self) -> PreferenceBundle:
        return self._preferences

    def get_behavior(self) -> BehaviorProfile:
        return self.behavior_store.snapshot()

    @property
    def feedback_history(self) -> tuple[FeedbackEvent, ...]:
        """Submitted feedback, oldest first."""
        return tuple(a for a in self._adjustments if isinstance(a, FeedbackEvent))

    # Mutations

    def subscribe(self, callback: Callable[[PersonalizationState], None]) -> Unsubscribe:
        """Register a listener called after every published change.

        Returns:
            Handle that deregisters the listener
        """
        if self._closed:
            return lambda: None
        return self._subscribers.subscribe(callback)

    def _publish(self) -> None:
        if not self._closed:
            self._subscribers.notify(self.state)

    def record_event(self, event: BehaviorEvent) -> BehaviorProfile:
        """Fold an interaction event into the behavior profile.

        The persona is not recomputed until the next re-evaluation.
        """
        if self._closed:
            return self.behavior_store.snapshot()

        profile = self.behavior_store.record(event)
        self._publish()
        return profile

    async def reevaluate(self) -> PersonalizationState:
        """Recompute persona and preferences from the current behavior.

        Concurrent calls queue behind each other and publish in call order.
        A call overtaken by reset() publishes nothing.

        Returns:
            The state after this re-evaluation
        """
        if self._closed:
            return self.state

        generation = self._generation
        self._pending_reevaluations += 1
        try:
            async with self._reevaluate_lock:
                await self.classifier.initialize()
                if self._closed or generation != self._generation:
                    return self.state

                features = normalize(self.behavior_store.snapshot())
                persona, scores = self.classifier.predict(features)
                base = map_persona(persona)

                self._persona = persona
                self._scores = scores
                self._preferences = apply_adjustments(base, self._adjustments)
        finally:
            self._pending_reevaluations -= 1

        logger.debug("Re-evaluated persona: %s", persona.value)
        self._publish()
        return self.state

    def submit_feedback(self, feedback: FeedbackEvent) -> PreferenceBundle:
        """Record feedback and apply it to the published preferences immediately."""
        if self._closed:
            return self._preferences

        self._adjustments.append(feedback)
        self._preferences = apply_feedback(self._preferences, feedback)
        self._publish()
        return self._preferences

    def set_manual_preference(self, field_name: str, value: Any) -> PreferenceBundle:
        """Override one preference field until reset().

        Raises:
            ValueError: If the field or value is not a valid preference
        """
        if self._closed:
            return self._preferences

        preferences = self._preferences.with_field(field_name, value)
        self._adjustments.append(
            ManualOverride(field_name=field_name, value=getattr(preferences, field_name))
        )
        self._preferences = preferences
        self._publish()
        return self._preferences

    def reset(self) -> PersonalizationState:
        """Forget behavior, feedback and overrides and publish the default state."""
        if self._closed:
            return self.state

        self._generation += 1
        self.behavior_store.reset()
        self._adjustments.clear()
        self._persona = DEFAULT_PERSONA
        self._scores = UNIFORM_SCORES
        self._preferences = DEFAULT_PREFERENCES

        self._publish()
        return self.state
