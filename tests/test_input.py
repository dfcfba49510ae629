"""Tests for key normalisation and throttling."""

from proctop.input import BACKSPACE, ENTER, ESCAPE, KeyThrottle, normalize_key


class TestNormalizeKey:
    """Tests for normalize_key."""

    def test_printable_keys_become_characters(self):
        """Test printable keys map to their character."""
        assert normalize_key("f", "f") == "f"
        assert normalize_key("space", " ") == " "
        assert normalize_key("minus", "-") == "-"

    def test_named_keys(self):
        """Test navigation and editing keys keep stable names."""
        assert normalize_key("enter", "\r") == ENTER
        assert normalize_key("escape", "\x1b") == ESCAPE
        assert normalize_key("backspace", "\x7f") == BACKSPACE
        assert normalize_key("up", None) == "up"

    def test_newline_is_enter(self):
        """Test a raw newline character submits."""
        assert normalize_key("ctrl+j", "\n") == ENTER


class TestKeyThrottle:
    """Tests for KeyThrottle."""

    def test_drops_events_inside_window(self, clock):
        """Test only one event is delivered per window."""
        throttle = KeyThrottle(0.15, clock=clock)
        assert throttle.allow()
        clock.advance(0.1)
        assert not throttle.allow()
        clock.advance(0.06)
        assert throttle.allow()

    def test_dropped_events_do_not_extend_window(self, clock):
        """Test the window is measured from the last delivered event."""
        throttle = KeyThrottle(0.15, clock=clock)
        throttle.allow()
        clock.advance(0.1)
        throttle.allow()
        clock.advance(0.06)
        assert throttle.allow()

    def test_zero_window_allows_everything(self, clock):
        """Test a zero window disables throttling."""
        throttle = KeyThrottle(0.0, clock=clock)
        assert all(throttle.allow() for _ in range(5))
