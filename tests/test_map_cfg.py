import pytest

from servio.config import Key
from servio.map_cfg import cfg_key_for, iface_name_for, iface_names


def test_all_keys_covered_once():
    names = iface_names()
    keys = [cfg_key_for(n) for n in names]
    assert set(keys) == set(Key)
    assert len(keys) == len(Key)
    assert len(set(names)) == len(names)


@pytest.mark.parametrize("name", iface_names())
def test_name_round_trip(name):
    assert iface_name_for(cfg_key_for(name)) == name


@pytest.mark.parametrize("key", list(Key))
def test_key_round_trip(key):
    assert cfg_key_for(iface_name_for(key)) is key


def test_pinned_entries():
    assert cfg_key_for("velocity_to_current_lim_scale") is Key.VELOCITY_TO_CURR_LIM_SCALE
    assert cfg_key_for("position_higher_angle") is Key.POSITION_HIGH_ANGLE
    assert iface_name_for(Key.QUAD_ENCD_RANGE) == "quad_encoder_range"
    assert iface_names()[0] == "model"


def test_accepts_integer_key():
    assert iface_name_for(int(Key.GROUP_ID)) == "group_id"


def test_unknown_name_raises():
    with pytest.raises(KeyError):
        cfg_key_for("no_such_field")


def test_unknown_key_raises():
    with pytest.raises(ValueError):
        iface_name_for(999)