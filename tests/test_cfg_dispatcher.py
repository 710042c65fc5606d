import pytest

from servio.base import PIPI, ControlLoop, Limits
from servio.cfg_dispatcher import ConfigDispatcher, apply_all, apply_config
from servio.cnv import Converter
from servio.config import Key, default_config
from servio.control import Control


class FakeMetrics:
    def __init__(self):
        self.position_range = None
        self.moving_step = None

    def set_position_range(self, lim):
        self.position_range = lim

    def set_moving_step(self, step):
        self.moving_step = step


class FakeMonitor:
    def __init__(self):
        self.minimum_voltage = None
        self.maximum_temperature = None

    def set_minimum_voltage(self, value):
        self.minimum_voltage = value

    def set_maximum_temperature(self, value):
        self.maximum_temperature = value


class FakeMotor:
    def __init__(self):
        self.invert = None

    def set_invert(self, invert):
        self.invert = invert


class FakePosition:
    position_range = (0, 4096)


@pytest.fixture
def disp():
    return ConfigDispatcher(
        cfg_map=default_config(),
        ctl=Control(0),
        conv=Converter(),
        met=FakeMetrics(),
        mon=FakeMonitor(),
        motor=FakeMotor(),
        pos=FakePosition(),
    )


def test_full_apply_pushes_defaults(disp):
    disp.full_apply()
    assert disp.mon.minimum_voltage == 6.0
    assert disp.mon.maximum_temperature == 80.0
    assert disp.motor.invert is False
    assert disp.met.moving_step == pytest.approx(0.05)
    assert disp.conv.current.scale == 1.0
    assert disp.conv.position.convert(0) == pytest.approx(0.0)
    assert disp.conv.position.convert(4096) == pytest.approx(PIPI, rel=1e-6)


def test_full_apply_configures_control_limits(disp):
    disp.full_apply()
    disp.ctl.switch_to_current_control(0, 10.0)
    assert disp.ctl.desired_current() == 2.0
    disp.ctl.switch_to_velocity_control(0, -10.0)
    assert disp.ctl.desired_velocity() == -3.0
    disp.ctl.switch_to_position_control(0, 100.0)
    assert disp.ctl.desired_position() == pytest.approx(PIPI - 0.1, rel=1e-6)


def test_set_stores_and_applies(disp):
    disp.set(Key.INVERT_HBRIDGE, True)
    assert disp.get(Key.INVERT_HBRIDGE) is True
    assert disp.motor.invert is True

    disp.set(Key.CURRENT_CONV_OFFSET, 0.5)
    assert disp.conv.current.offset == 0.5
    assert disp.conv.current.scale == 1.0

    disp.set(Key.VOLTAGE_CONV_SCALE, 0.25)
    assert disp.conv.vcc.scale == 0.25

    disp.set(Key.TEMP_CONV_SCALE, 2.0)
    assert disp.conv.temp.scale == 2.0


def test_position_angles_update_metrics_and_converter(disp):
    disp.set(Key.POSITION_LOW_ANGLE, 1.0)
    assert disp.met.position_range.low == 1.0
    assert disp.met.position_range.high == pytest.approx(PIPI, rel=1e-6)
    assert disp.conv.position.convert(0) == pytest.approx(1.0)


def test_set_rejects_wrong_type(disp):
    with pytest.raises(TypeError):
        disp.set(Key.INVERT_HBRIDGE, "yes")


def test_apply_config_current_limits():
    ctl = Control(0)
    m = default_config()
    m.set(Key.CURRENT_LIM_MIN, -1.0)
    m.set(Key.CURRENT_LIM_MAX, 1.0)
    apply_config(ctl, m, Key.CURRENT_LIM_MAX)
    ctl.switch_to_current_control(0, -5.0)
    assert ctl.desired_current() == -1.0


def test_apply_config_ignores_unrelated_keys():
    ctl = Control(0)
    apply_config(ctl, default_config(), Key.ID)
    ctl.switch_to_current_control(0, 5.0)
    assert ctl.desired_current() == 5.0


def test_apply_all_sets_position_limits():
    ctl = Control(0)
    m = default_config()
    m.set(Key.POSITION_LIM_MIN, -1.0)
    m.set(Key.POSITION_LIM_MAX, 1.0)
    apply_all(ctl, m)
    ctl.switch_to_position_control(0, 3.0)
    assert ctl.desired_position() == 1.0
    ctl.set_limits(ControlLoop.POSITION, Limits(-0.5, 0.5))
    ctl.switch_to_position_control(0, 3.0)
    assert ctl.desired_position() == 0.5