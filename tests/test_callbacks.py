import pytest

from servio.base import Limits
from servio.callbacks import (
    AvgFilter,
    CurrentCallback,
    PositionCallback,
    StandardCallbacks,
)
from servio.cnv import Converter
from servio.control import Control
from servio.pid import ControlConfig, PidCoefficients


class ClockMock:
    def __init__(self, t=0):
        self.t = t

    def now(self):
        return self.t


class MotorMock:
    def __init__(self, direction=1):
        self.direction = direction
        self.power = None

    def set_power(self, power):
        self.power = power


class MetricsMock:
    def __init__(self):
        self.calls = []
        self.position = 0.0
        self.velocity = 0.0
        self.is_moving = False

    def position_irq(self, now, position):
        self.calls.append((now, position))
        self.position = position


class Registrar:
    def __init__(self):
        self.registered = None

    def set_period_callback(self, cb):
        self.registered = cb

    def set_position_callback(self, cb):
        self.registered = cb

    def set_current_callback(self, cb):
        self.registered = cb


def test_avg_filter_starts_at_zero():
    assert AvgFilter().get() == 0.0


def test_avg_filter_full_of_same_value():
    f = AvgFilter()
    for _ in range(AvgFilter.SIZE):
        f.add(2.0)
    assert f.get() == pytest.approx(2.0)


def test_avg_filter_forgets_old_values():
    f = AvgFilter()
    for _ in range(AvgFilter.SIZE):
        f.add(100.0)
    for _ in range(AvgFilter.SIZE):
        f.add(3.0)
    assert f.get() == pytest.approx(3.0)


def test_avg_filter_single_value_is_diluted():
    f = AvgFilter()
    f.add(16.0)
    assert f.get() == pytest.approx(1.0)


def test_current_callback_power_mode_passes_power():
    ctl = Control(0)
    ctl.switch_to_power_control(0.3)
    motor = MotorMock()
    cb = CurrentCallback(motor, ctl, ClockMock(10), Converter())
    cb.on_value_irq(100, [])
    assert motor.power == 0.3


def test_current_callback_current_mode_drives_motor():
    ctl = Control(0, ControlConfig(current_pid=PidCoefficients(p=1.0)))
    ctl.switch_to_current_control(0, 0.5)
    motor = MotorMock()
    cb = CurrentCallback(motor, ctl, ClockMock(10), Converter())
    cb.on_value_irq(0, [])
    assert motor.power == ctl.power()
    assert 0.0 < motor.power <= 1.0


def test_current_callback_sign_follows_direction():
    motor = MotorMock(direction=-1)
    cb = CurrentCallback(motor, Control(0), ClockMock(5), Converter())
    cb.on_value_irq(16, [])
    assert cb.filter.get() < 0.0


def test_position_callback_feeds_converted_position():
    conv = Converter()
    conv.position.scale = 2.0
    conv.position.offset = 1.0
    met = MetricsMock()
    clk = ClockMock(7)
    cb = PositionCallback(Control(0), met, clk, conv)
    cb.on_value_irq(10)
    assert met.calls == [(7, conv.position.convert(10))]


def test_position_callback_runs_position_loop():
    ctl = Control(
        0,
        ControlConfig(
            position_pid=PidCoefficients(p=1.0),
            current_limits=Limits(-1.0, 1.0),
            position_limits=Limits(-10.0, 10.0),
            static_friction_scale=2.0,
            static_friction_decay=1.0,
        ),
    )
    ctl.switch_to_position_control(0, 0.5)
    met = MetricsMock()
    met.is_moving = True
    cb = PositionCallback(ctl, met, ClockMock(10), Converter())
    cb.on_value_irq(0)
    assert ctl.desired_current() == pytest.approx(0.5)


def test_standard_callbacks_registers_all():
    sc = StandardCallbacks(MotorMock(), ClockMock(), Control(0), MetricsMock(), Converter())
    period, pos_drv, curr_drv = Registrar(), Registrar(), Registrar()
    period_cb = object()
    sc.set_callbacks(period, period_cb, pos_drv, curr_drv)
    assert period.registered is period_cb
    assert pos_drv.registered is sc.pos_cb
    assert curr_drv.registered is sc.current_cb