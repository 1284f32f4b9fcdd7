"""
Event Bus - Temporary Subscriber Tests
========================================
Covers:
- Delivery inside the with-block
- No delivery after the block exits
- Removal when the block raises
- Only the temporary subscription is removed
- Invalid arguments register nothing
"""

import pytest

from eventbus import EventBus, InvalidSubscription


class Probe:
    def __init__(self):
        self.events = []

    def record(self, payload):
        self.events.append(payload["event_name"])


@pytest.fixture
def bus():
    return EventBus()


class TestTemporarySubscriber:
    def test_receives_inside_scope_only(self, bus):
        probe = Probe()
        with bus.with_temporary_subscriber("job.done", probe, "record"):
            bus.publish("job.done", {})
        bus.publish("job.done", {})
        assert probe.events == ["job.done"]

    def test_removed_when_block_raises(self, bus):
        probe = Probe()
        with pytest.raises(RuntimeError, match="scoped work failed"):
            with bus.with_temporary_subscriber("job.done", probe, "record"):
                bus.publish("job.done", {})
                raise RuntimeError("scoped work failed")

        bus.publish("job.done", {})
        assert probe.events == ["job.done"]
        assert len(bus.registry) == 0

    def test_yields_the_listener(self, bus):
        probe = Probe()
        with bus.with_temporary_subscriber("x", probe, "record") as listener:
            assert listener.identity() is probe
            assert bus.registry.last() is listener

    def test_other_subscriptions_survive(self, bus):
        probe = Probe()
        bus.subscribe("x", probe, "record")
        with bus.with_temporary_subscriber("x", probe, "record"):
            bus.subscribe("x", probe, "record")
        assert len(bus.registry) == 2

        bus.publish("x")
        assert probe.events == ["x", "x"]

    def test_block_form(self, bus):
        seen = []
        with bus.with_temporary_subscriber("x", block=seen.append):
            bus.publish("x", {"n": 1})
        bus.publish("x", {"n": 2})
        assert seen == [{"n": 1, "event_name": "x"}]

    def test_invalid_arguments(self, bus):
        with pytest.raises(InvalidSubscription):
            with bus.with_temporary_subscriber("x", Probe()):
                pass
        assert len(bus.registry) == 0
