"""Tests for platform result bus."""

from unittest import mock

from src.twitter_login.events import PlatformResult, PlatformResultBus


class TestPlatformResultBus:
    """Tests for PlatformResultBus class."""

    def test_publish_reaches_all_listeners(self):
        """Every subscriber receives the result."""
        bus = PlatformResultBus()
        first, second = mock.Mock(), mock.Mock()
        bus.subscribe(first)
        bus.subscribe(second)

        delivered = bus.publish(140, -1, {"oauth_verifier": "v"})

        expected = PlatformResult(140, -1, {"oauth_verifier": "v"})
        first.assert_called_once_with(expected)
        second.assert_called_once_with(expected)
        assert delivered == 2

    def test_publish_without_listeners(self):
        """Publishing with no listeners is fine."""
        assert PlatformResultBus().publish(1, 0) == 0

    def test_failing_listener_does_not_stop_delivery(self):
        """A listener that raises does not block the others."""
        bus = PlatformResultBus()
        bus.subscribe(mock.Mock(side_effect=RuntimeError("boom")))
        after = mock.Mock()
        bus.subscribe(after)

        bus.publish(140, 0)

        after.assert_called_once()

    def test_unsubscribe(self):
        """Unsubscribed listeners receive nothing."""
        bus = PlatformResultBus()
        listener = mock.Mock()
        unsubscribe = bus.subscribe(listener)

        unsubscribe()
        unsubscribe()
        bus.publish(140, -1)

        listener.assert_not_called()
        assert len(bus) == 0
