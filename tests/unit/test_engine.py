"""Unit tests for the personalization engine."""

import asyncio
import itertools

import pytest

from personashop.behavior import BehaviorEvent
from personashop.config import EngineConfig
from personashop.engine import PersonalizationEngine
from personashop.personas import UNIFORM_SCORES, ClassifierState, PersonaLabel
from personashop.preferences import (
    DEFAULT_PREFERENCES,
    ColorScheme,
    FeedbackEvent,
    LayoutStyle,
    map_persona,
)
from personashop.scenarios import SCENARIOS
from personashop.storage import FileKeyValueStore, InMemoryKeyValueStore


class StubClassifier:
    """Classifier double that returns a scripted sequence of personas."""

    def __init__(self, personas: list[PersonaLabel] | None = None) -> None:
        self.personas = list(personas or [PersonaLabel.RESEARCHER])
        self.predict_calls = 0
        self.gate: asyncio.Event | None = None
        self.state = ClassifierState.READY

    @property
    def is_ready(self) -> bool:
        return True

    async def initialize(self) -> None:
        if self.gate is not None:
            await self.gate.wait()
        await asyncio.sleep(0)

    def predict(self, features):
        persona = self.personas[min(self.predict_calls, len(self.personas) - 1)]
        self.predict_calls += 1
        return persona, UNIFORM_SCORES


def make_engine(config, storage, session_storage, classifier) -> PersonalizationEngine:
    return PersonalizationEngine(
        config=config,
        storage=storage,
        session_storage=session_storage,
        classifier=classifier,
    )


def test_defaults_before_start(config, storage, session_storage, degraded_classifier) -> None:
    """Test a new engine publishes the default state."""
    engine = make_engine(config, storage, session_storage, degraded_classifier)

    assert engine.get_persona() is PersonaLabel.NEW_VISITOR
    assert engine.get_persona_scores() is UNIFORM_SCORES
    assert engine.get_preferences() == DEFAULT_PREFERENCES
    assert engine.get_behavior().session_count == 1
    assert not engine.is_running
    assert not engine.state.is_loading


@pytest.mark.asyncio
async def test_bargain_hunter_scenario(config, storage, session_storage) -> None:
    """Test heavy price filtering and deep scrolling reads as a bargain hunter."""
    async with PersonalizationEngine(
        config=config, storage=storage, session_storage=session_storage
    ) as engine:
        assert engine.classifier.is_ready

        for event in SCENARIOS["bargain_hunter"]:
            engine.record_event(event)
        state = await engine.reevaluate()

    assert state.persona is PersonaLabel.BARGAIN_HUNTER
    assert state.scores[PersonaLabel.BARGAIN_HUNTER] == max(state.scores.values())
    assert sum(state.scores.values()) == pytest.approx(1.0, abs=1e-6)
    assert state.preferences == map_persona(PersonaLabel.BARGAIN_HUNTER)


@pytest.mark.asyncio
async def test_degraded_classifier_publishes_new_visitor(
    config, storage, session_storage, degraded_classifier
) -> None:
    """Test a failed classifier leaves the engine usable with default persona."""
    async with make_engine(config, storage, session_storage, degraded_classifier) as engine:
        engine.record_event(BehaviorEvent.price_filter_used())
        state = await engine.reevaluate()

    assert degraded_classifier.state is ClassifierState.DEGRADED
    assert state.persona is PersonaLabel.NEW_VISITOR
    assert state.scores is UNIFORM_SCORES


@pytest.mark.asyncio
async def test_feedback_applies_immediately(
    config, storage, session_storage, degraded_classifier
) -> None:
    """Test a colors dislike changes the scheme without a re-evaluation."""
    async with make_engine(config, storage, session_storage, degraded_classifier) as engine:
        published = []
        engine.subscribe(published.append)

        preferences = engine.submit_feedback(FeedbackEvent.dislike("colors"))

        assert preferences.color_scheme is ColorScheme.VIBRANT
        assert engine.get_preferences().color_scheme is ColorScheme.VIBRANT
        assert published[-1].preferences.color_scheme is ColorScheme.VIBRANT
        assert len(engine.feedback_history) == 1


@pytest.mark.asyncio
async def test_adjustments_survive_reevaluation(config, storage, session_storage) -> None:
    """Test feedback and manual overrides are reapplied over the persona defaults."""
    classifier = StubClassifier([PersonaLabel.RESEARCHER])
    async with make_engine(config, storage, session_storage, classifier) as engine:
        engine.submit_feedback(FeedbackEvent.dislike("layout"))
        engine.set_manual_preference("show_deals", True)

        state = await engine.reevaluate()

    base = map_persona(PersonaLabel.RESEARCHER)
    assert state.persona is PersonaLabel.RESEARCHER
    assert state.preferences.layout_style is LayoutStyle.COMPACT  # list -> compact
    assert base.show_deals is False
    assert state.preferences.show_deals is True


@pytest.mark.asyncio
async def test_manual_preference_validation(
    config, storage, session_storage, degraded_classifier
) -> None:
    """Test invalid overrides are rejected and leave the state untouched."""
    async with make_engine(config, storage, session_storage, degraded_classifier) as engine:
        before = engine.get_preferences()
        with pytest.raises(ValueError):
            engine.set_manual_preference("sparkles", True)
        with pytest.raises(ValueError):
            engine.set_manual_preference("layout_style", "carousel")

        assert engine.get_preferences() == before
        assert before == map_persona(PersonaLabel.NEW_VISITOR)

        engine.set_manual_preference("layout_style", "list")
        assert engine.get_preferences().layout_style is LayoutStyle.LIST


@pytest.mark.asyncio
async def test_reset_restores_defaults(config, storage, session_storage) -> None:
    """Test reset forgets behavior, feedback and overrides."""
    classifier = StubClassifier([PersonaLabel.IMPULSE_BUYER])
    async with make_engine(config, storage, session_storage, classifier) as engine:
        engine.record_event(BehaviorEvent.clicked())
        engine.submit_feedback(FeedbackEvent.dislike("colors"))
        engine.set_manual_preference("font_size", "small")
        await engine.reevaluate()
        assert engine.get_persona() is PersonaLabel.IMPULSE_BUYER

        state = engine.reset()

        assert state.persona is PersonaLabel.NEW_VISITOR
        assert state.scores is UNIFORM_SCORES
        assert state.preferences == DEFAULT_PREFERENCES
        assert state.behavior.click_count == 0
        assert engine.feedback_history == ()
        assert storage.get(config.behavior_key) is None


@pytest.mark.asyncio
async def test_subscribers_in_order_and_unsubscribe(
    config, storage, session_storage, degraded_classifier
) -> None:
    """Test listeners see each change in registration order."""
    async with make_engine(config, storage, session_storage, degraded_classifier) as engine:
        calls = []
        engine.subscribe(lambda s: calls.append(("a", s.behavior.click_count)))
        unsubscribe = engine.subscribe(lambda s: calls.append(("b", s.behavior.click_count)))

        engine.record_event(BehaviorEvent.clicked())
        unsubscribe()
        unsubscribe()
        engine.record_event(BehaviorEvent.clicked())

    assert calls == [("a", 1), ("b", 1), ("a", 2)]


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_block_others(
    config, storage, session_storage, degraded_classifier
) -> None:
    """Test a raising listener is isolated from the rest."""
    async with make_engine(config, storage, session_storage, degraded_classifier) as engine:
        seen = []

        def broken(state):
            raise RuntimeError("render failed")

        engine.subscribe(broken)
        engine.subscribe(seen.append)
        engine.record_event(BehaviorEvent.review_read())

    assert len(seen) == 1
    assert seen[0].behavior.review_reads == 1


@pytest.mark.asyncio
async def test_reevaluations_publish_in_call_order(config, storage, session_storage) -> None:
    """Test concurrent re-evaluations complete in the order they were issued."""
    classifier = StubClassifier(
        [
            PersonaLabel.NEW_VISITOR,  # consumed by start()
            PersonaLabel.BARGAIN_HUNTER,
            PersonaLabel.RESEARCHER,
            PersonaLabel.LOYAL_CUSTOMER,
        ]
    )
    async with make_engine(config, storage, session_storage, classifier) as engine:
        published = []
        engine.subscribe(lambda s: published.append(s.persona))

        await asyncio.gather(engine.reevaluate(), engine.reevaluate(), engine.reevaluate())

        assert engine.get_persona() is PersonaLabel.LOYAL_CUSTOMER
        assert not engine.state.is_loading

    assert published == [
        PersonaLabel.BARGAIN_HUNTER,
        PersonaLabel.RESEARCHER,
        PersonaLabel.LOYAL_CUSTOMER,
    ]


@pytest.mark.asyncio
async def test_reset_discards_in_flight_reevaluation(config, storage, session_storage) -> None:
    """Test a re-evaluation overtaken by reset publishes nothing."""
    classifier = StubClassifier([PersonaLabel.NEW_VISITOR, PersonaLabel.IMPULSE_BUYER])
    async with make_engine(config, storage, session_storage, classifier) as engine:
        classifier.gate = asyncio.Event()
        pending = asyncio.create_task(engine.reevaluate())
        await asyncio.sleep(0)
        assert engine.state.is_loading

        engine.reset()
        classifier.gate.set()
        state = await pending

        assert state.persona is PersonaLabel.NEW_VISITOR
        assert engine.get_preferences() == DEFAULT_PREFERENCES
        assert classifier.predict_calls == 1
        assert not engine.state.is_loading


@pytest.mark.asyncio
async def test_stop_halts_notifications(config, storage, session_storage) -> None:
    """Test nothing is published or recorded after stop()."""
    engine = make_engine(config, storage, session_storage, StubClassifier())
    await engine.start()
    published = []
    engine.subscribe(published.append)

    await engine.stop()
    await engine.stop()

    engine.record_event(BehaviorEvent.clicked())
    await engine.reevaluate()
    engine.submit_feedback(FeedbackEvent.dislike("colors"))

    assert published == []
    assert engine.get_behavior().click_count == 0
    assert not engine.is_running
    assert engine.subscribe(published.append)() is None


@pytest.mark.asyncio
async def test_timers_tick_until_stopped(storage, session_storage) -> None:
    """Test periodic re-evaluation and time-on-page tracking run in the background."""
    config = EngineConfig(
        storage_dir=None,
        reevaluate_interval_seconds=0.01,
        time_tick_seconds=0.01,
    )
    ticks = itertools.count()
    classifier = StubClassifier()
    engine = PersonalizationEngine(
        config=config,
        storage=storage,
        session_storage=session_storage,
        classifier=classifier,
        clock=lambda: float(next(ticks)),
    )

    await engine.start()
    await asyncio.sleep(0.1)
    await engine.stop()

    assert classifier.predict_calls > 1
    assert engine.get_behavior().time_on_page_sec > 0

    calls_after_stop = classifier.predict_calls
    await asyncio.sleep(0.05)
    assert classifier.predict_calls == calls_after_stop
    assert engine._tasks == []


@pytest.mark.asyncio
async def test_behavior_persists_across_engines(tmp_path, config) -> None:
    """Test a later session restores the durable profile."""
    storage = FileKeyValueStore(tmp_path)

    async with make_engine(config, storage, InMemoryKeyValueStore(), StubClassifier()) as first:
        first.record_event(BehaviorEvent.product_viewed("P1"))
        first.record_event(BehaviorEvent.searched("boots"))

    second = make_engine(config, storage, InMemoryKeyValueStore(), StubClassifier())

    behavior = second.get_behavior()
    assert behavior.product_views == ("P1",)
    assert behavior.search_queries == ("boots",)
    assert behavior.session_count == 2


def test_storage_dir_selects_file_store(tmp_path) -> None:
    """Test the configured storage directory is used when no store is given."""
    config = EngineConfig(storage_dir=tmp_path, reevaluate_interval_seconds=0, time_tick_seconds=0)
    engine = PersonalizationEngine(config=config, classifier=StubClassifier())

    engine.record_event(BehaviorEvent.clicked())

    assert (tmp_path / f"{config.behavior_key}.json").exists()


@pytest.mark.asyncio
async def test_loading_while_classifier_trains(config, storage, session_storage) -> None:
    """Test the engine reports loading from start until the first evaluation."""
    classifier = StubClassifier([PersonaLabel.RESEARCHER])
    classifier.gate = asyncio.Event()
    engine = make_engine(config, storage, session_storage, classifier)

    starting = asyncio.create_task(engine.start())
    await asyncio.sleep(0)
    assert engine.state.is_loading

    classifier.gate.set()
    await starting

    assert not engine.state.is_loading
    assert engine.get_persona() is PersonaLabel.RESEARCHER
    await engine.stop()


@pytest.mark.asyncio
async def test_reset_with_unusable_storage_key(tmp_path, degraded_classifier) -> None:
    """Test an invalid storage key never escapes reset."""
    config = EngineConfig(
        storage_dir=tmp_path,
        behavior_key="user/data",
        reevaluate_interval_seconds=0,
        time_tick_seconds=0,
    )
    async with PersonalizationEngine(config=config, classifier=degraded_classifier) as engine:
        engine.record_event(BehaviorEvent.clicked())
        engine.submit_feedback(FeedbackEvent.dislike("colors"))
        published = []
        engine.subscribe(published.append)

        state = engine.reset()

    assert state.behavior.click_count == 0
    assert state.preferences == DEFAULT_PREFERENCES
    assert len(published) == 1
