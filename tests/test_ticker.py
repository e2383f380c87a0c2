"""Tests for IdentifierTicker and identifier parsing."""

import pytest

from desk_core.ticker import IdentifierTicker, parse_identifier, ease_in_out

from conftest import FakeAfter


class FakeClock:

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def make_ticker(prefix="MH26"):
    rendered = []
    after = FakeAfter()
    clock = FakeClock()
    ticker = IdentifierTicker(rendered.append, after.after, after.after_cancel,
                              prefix=prefix, duration_ms=1500, frame_ms=16, clock=clock)
    return ticker, rendered, after, clock


def run_to_end(ticker, after, clock, step=0.016):
    while ticker.animating:
        clock.now += step
        after.run_next()


class TestParseIdentifier:

    def test_configured_prefix(self):
        assert parse_identifier("MH26000099", "MH26") == ("MH26", 99, 6)

    def test_alpha_prefix_without_config(self):
        assert parse_identifier("MH000042") == ("MH", 42, 6)

    @pytest.mark.parametrize("value", ["", None, "XYZ", "MH26", "MH26ABC", "XX26000001"])
    def test_unparsable(self, value):
        assert parse_identifier(value, "MH26") is None


class TestEase:

    def test_endpoints_and_midpoint(self):
        assert ease_in_out(0.0) == pytest.approx(0.0)
        assert ease_in_out(0.5) == pytest.approx(0.5)
        assert ease_in_out(1.0) == pytest.approx(1.0)

    def test_clamped(self):
        assert ease_in_out(-1) == pytest.approx(0.0)
        assert ease_in_out(2) == pytest.approx(1.0)


class TestIdentifierTicker:

    def test_first_value_shown_immediately(self):
        ticker, rendered, after, _ = make_ticker()
        ticker.on_new_value(None, "MH26000099")
        assert rendered == ["MH26000099"]
        assert not ticker.animating

    def test_rolls_up_and_ends_on_exact_value(self):
        ticker, rendered, after, clock = make_ticker()
        ticker.on_new_value("MH26000099", "MH26000105")
        assert ticker.animating
        run_to_end(ticker, after, clock)

        assert rendered[0] == "MH26000099"
        assert rendered[-1] == "MH26000105"
        numbers = [int(text[4:]) for text in rendered]
        assert numbers == sorted(numbers)
        assert all(len(text) == len("MH26000105") for text in rendered)

    def test_unparsable_value_rendered_verbatim(self):
        ticker, rendered, _, _ = make_ticker()
        ticker.on_new_value("MH26000099", "XYZ")
        assert rendered == ["XYZ"]
        assert not ticker.animating

    def test_same_value_no_animation(self):
        ticker, rendered, _, _ = make_ticker()
        ticker.on_new_value("MH26000099", "MH26000099")
        assert rendered == ["MH26000099"]

    def test_new_value_mid_animation_restarts_from_it(self):
        ticker, rendered, after, clock = make_ticker()
        ticker.on_new_value("MH26000000", "MH26000100")
        clock.now += 0.5
        after.run_next()

        ticker.on_new_value("MH26000100", "MH26000200")
        assert len(after.jobs) == 1
        run_to_end(ticker, after, clock)
        assert rendered[-1] == "MH26000200"

    def test_cancel_stops_frames(self):
        ticker, _, after, _ = make_ticker()
        ticker.on_new_value("MH26000001", "MH26000050")
        ticker.cancel()
        assert not ticker.animating
        assert after.jobs == {}

    def test_countdown_also_supported(self):
        ticker, rendered, after, clock = make_ticker()
        ticker.on_new_value("MH26000010", "MH26000001")
        run_to_end(ticker, after, clock)
        assert rendered[-1] == "MH26000001"
