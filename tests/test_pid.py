import pytest

from servio.base import Limits
from servio.pid import ControlConfig, Pid, PidCoefficients


def make_pid(p=0.0, i=0.0, d=0.0, low=-100.0, high=100.0, now=0):
    return Pid(now, PidCoefficients(p=p, i=i, d=d), Limits(low, high))


def test_update_at_same_time_keeps_output():
    pid = make_pid(p=1.0)
    assert pid.update(0, 0.0, 50.0) == 0.0
    assert pid.last_time == 0
    assert pid.i_sum == 0.0


def test_proportional_term():
    pid = make_pid(p=2.0)
    assert pid.update(10, 1.0, 3.0) == pytest.approx(4.0)
    assert pid.last_time == 10
    assert pid.last_measured == 1.0


def test_derivative_acts_on_measurement():
    pid = make_pid(d=10.0)
    pid.reset(0, 0.0)
    assert pid.update(10, 5.0, 5.0) == pytest.approx(-5.0)


def test_output_is_clamped_to_limits():
    pid = make_pid(p=100.0, low=-1.0, high=1.0)
    assert pid.update(1, 0.0, 10.0) == 1.0
    assert pid.update(2, 0.0, -10.0) == -1.0


def test_integral_is_clamped_to_limits():
    pid = make_pid(i=1.0, low=-2.0, high=2.0)
    for t in range(1, 50):
        pid.update(t * 100, 0.0, 1.0)
        assert -2.0 <= pid.i_sum <= 2.0
    assert pid.i_sum == 2.0


def test_reset_tracks_measurement_but_keeps_integral():
    pid = make_pid(i=0.5)
    pid.update(10, 0.0, 1.0)
    i_sum = pid.i_sum
    pid.reset(20, 3.0)
    assert pid.last_time == 20
    assert pid.last_measured == 3.0
    assert pid.i_sum == i_sum


def test_update_limits_clamps_state():
    pid = make_pid(p=1.0, i=1.0)
    pid.update(10, 0.0, 5.0)
    assert pid.output > 1.0
    pid.update_limits(Limits(-1.0, 1.0))
    assert pid.limits == Limits(-1.0, 1.0)
    assert pid.i_sum <= 1.0
    assert pid.output <= 1.0


def test_limits_are_copied():
    lims = Limits(-1.0, 1.0)
    pid = Pid(0, PidCoefficients(), lims)
    lims.high = 50.0
    assert pid.limits.high == 1.0


def test_control_config_fields_are_independent():
    a = ControlConfig()
    b = ControlConfig()
    a.position_limits.high = 5.0
    assert b.position_limits.high != a.position_limits.high