import pytest

from socialnav.latency_compensator import LatencyCompensator, State2D


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def test_system_delay_is_sum():
    lc = LatencyCompensator(0.2, 0.05, 0.05)
    assert lc.system_delay == pytest.approx(0.25)
    lc.actuation_delay = 0.3
    assert lc.system_delay == pytest.approx(0.35)


def test_without_observation_returns_recorded_state():
    clock = FakeClock(10.0)
    lc = LatencyCompensator(0.1, 0.05, 0.05, clock=clock)
    lc.record_new_input(1.0, 0.5, 0.2)
    state = lc.predicted_state()
    assert state == State2D(0.0, 0.0, 0.0, 1.0, 0.5, 0.2)


def test_zero_delays_return_raw_observation():
    clock = FakeClock(5.0)
    lc = LatencyCompensator(0.0, 0.0, 0.05, clock=clock)
    lc.record_new_input(1.0, 0.0, 0.0)
    lc.record_observation(3.0, 4.0, 0.5)
    state = lc.predicted_state()
    assert (state.x, state.y, state.theta) == (3.0, 4.0, 0.5)


def test_prediction_discards_stale_and_integrates_recent():
    clock = FakeClock(10.0)
    dt = 0.05
    lc = LatencyCompensator(0.1, 0.05, dt, clock=clock)
    lc.record_new_input(1.0, 0.0, 0.0)
    clock.now = 10.2
    lc.record_new_input(2.0, 0.0, 0.5)
    lc.record_observation(0.0, 0.0, 0.0)
    state = lc.predicted_state()
    assert state.x == pytest.approx(2.0 * dt)
    assert state.theta == pytest.approx(0.5 * dt)
    assert (state.vx, state.omega) == (2.0, 0.5)
    # The stale input stays dropped on later predictions.
    assert lc.predicted_state().x == pytest.approx(2.0 * dt)


def test_predicted_state_is_a_copy():
    clock = FakeClock(1.0)
    lc = LatencyCompensator(0.1, 0.0, 0.1, clock=clock)
    lc.record_observation(1.0, 1.0, 0.0)
    first = lc.predicted_state()
    first.x = 99.0
    assert lc.predicted_state().x == 1.0