"""Tests for the in-process event dispatcher."""

import pytest

from quizhub.events.dispatcher import EventDispatcher, event_key
from quizhub.events.types import Event
from quizhub.schemas.category import CategoryCreate


class TestEventDispatcher:
    async def test_handlers_run_in_registration_order(self, db):
        dispatcher = EventDispatcher()
        calls: list[str] = []

        async def first(session, payload):
            calls.append(f"first:{payload['n']}")

        async def second(session, payload):
            calls.append(f"second:{payload['n']}")

        dispatcher.subscribe(Event.CATEGORY_CREATED, first)
        dispatcher.subscribe("categoryCreated", second)

        result = await dispatcher.dispatch(db, Event.CATEGORY_CREATED, {"n": 1})
        assert calls == ["first:1", "second:1"]
        assert result.ok
        assert result.handled == 2
        assert result.event_name == "categoryCreated"

    async def test_failing_handler_does_not_stop_others(self, db):
        dispatcher = EventDispatcher()
        calls: list[str] = []

        async def broken(session, payload):
            raise RuntimeError("boom")

        async def healthy(session, payload):
            calls.append("healthy")

        dispatcher.subscribe(Event.EXAM_CREATED, broken)
        dispatcher.subscribe(Event.EXAM_CREATED, healthy)

        result = await dispatcher.dispatch(db, Event.EXAM_CREATED, {})
        assert calls == ["healthy"]
        assert result.handled == 1
        assert not result.ok
        assert isinstance(result.errors[0], RuntimeError)

    async def test_raise_errors(self, db):
        dispatcher = EventDispatcher()

        async def broken(session, payload):
            raise ValueError("bad payload")

        dispatcher.subscribe(Event.EXAM_DELETED, broken)
        with pytest.raises(ValueError, match="bad payload"):
            await dispatcher.dispatch(db, Event.EXAM_DELETED, {}, raise_errors=True)

    async def test_event_without_handlers(self, db):
        result = await EventDispatcher().dispatch(db, Event.QUESTION_RATED, {})
        assert result.ok
        assert result.handled == 0

    def test_event_key(self):
        assert event_key(Event.CATEGORY_RATED) == "categoryRated"
        assert event_key("categoryRated") == "categoryRated"


async def test_subscriber_failure_keeps_primary_write(db, services, test_user):
    """The category stays created even when a subscriber blows up."""
    async def broken(session, payload):
        raise RuntimeError("activity store down")

    services.dispatcher.subscribe(Event.CATEGORY_CREATED, broken)
    category = await services.categories.create_category(CategoryCreate(name="Resilient"), test_user)

    assert services.category_provider.get_category(category.id).name == "Resilient"
