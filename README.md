# servio

The control core of a small servomotor as a plain Python library. It contains
the cascaded position → velocity → current controller, the conversion of raw
readings, the configuration registers with their binary storage format, and
a handler for the servo's text commands. A simple simulated motor is included,
so the logic can be exercised without hardware.

Times are always integer microseconds. Power is a float from `-1.0` to `1.0`.

## Modules

- `servio.base`: `ControlMode`, `ControlLoop`, `LedsVals`, and `Limits`, which has
  `clamp` and `intersection`. Also `from_seconds` and `from_millis`, which return
  microseconds, and the constants `INFTY`, `PI`, `PIPI`, `P_LOW` and `P_MAX`.
- `servio.fmt`: `JsonWriter`, `ArrayWriter` and `ObjectWriter` write JSON into a
  buffer of fixed capacity. Output that does not fit is dropped. Array and object
  writers are context managers that close their bracket on exit.
- `servio.cnv`: `LinearConverter` (`value * scale + offset`) and `Converter`, which
  holds converters for position, current, temperature and vcc. It also has
  `calc_current_conversion`, `calculate_current_conversion` (both return `OffScale`),
  `map_range`, `current` and `position`.
- `servio.sim`: `SimpleMotor`, a crude DC motor model with static friction, and
  `rotate_vec`.
- `servio.config`: the register keys `Key`, `EncoderMode`, `Payload`, `KeyVal`,
  `make_keyval` and `value_type`. `ConfigMap` is a typed set of all registers.
  Floats are stored in 32-bit precision and serialized as little-endian values.
  `default_config()` returns the factory defaults.
- `servio.storage`: `store` and `load` write and read a configuration page made of
  checksummed records. `find_unused_page`, `find_oldest_page`, `find_next_page` and
  `find_latest_page` choose among pages. `checksum` is the XOR checksum. If the
  data does not fit, `store` raises `StorageError`.
- `servio.map_cfg`: the mapping between command field names and register keys.
  It provides `cfg_key_for`, `iface_name_for` and `iface_names`.
- `servio.pid`: `Pid`, `PidCoefficients` and `ControlConfig`.
- `servio.regulator`: `LinearTransitionRegulator`. It gives the static-friction
  scaling and moves towards its high point while the motor is still.
- `servio.control`: `Control`, the cascaded controller.
- `servio.cfg_dispatcher`: `ConfigDispatcher` applies register changes to the
  converter, controller, metrics, monitor and motor. `apply_config` and
  `apply_all` push the controller registers alone.
- `servio.callbacks`: `AvgFilter`, `CurrentCallback`, `PositionCallback` and
  `StandardCallbacks`. These are the interrupt handlers that feed measurements
  into the controller.
- `servio.drivers`: `Drivers`, the bundle of drivers a board provides, with
  `any_uninitialized()`. It also has `StopCallback` and the global
  `STOP_CALLBACK` emergency-stop hook.
- `servio.dispatcher`: `parse_statement` (raises `ParseError`), `Dispatcher` and
  `handle_message`.

## Installation

```
pip install .
```

Run the tests:

```
pip install ".[test]"
pytest
```

## Controlling the simulated motor

```python
from servio.base import Limits, from_millis
from servio.control import Control
from servio.pid import ControlConfig, PidCoefficients
from servio.sim import SimpleMotor

now = 0
ctl = Control(
    now,
    ControlConfig(
        current_pid=PidCoefficients(p=0.0625, i=0.00000512, d=0.03125),
        current_limits=Limits(-3.0, 3.0),
    ),
)
motor = SimpleMotor(0.0)

ctl.switch_to_current_control(now, 0.1)
for _ in range(100):
    motor.apply_power(now, ctl.power())
    ctl.position_irq(now, motor.position())
    ctl.velocity_irq(now, motor.velocity)
    ctl.current_irq(now, motor.current)
    now += from_millis(5)
```

## Text commands

`handle_message(dispatcher, data, capacity)` parses one command given as bytes.
It returns a tuple `(parsed, reply)`, where `reply` is a JSON array of at most
`capacity` bytes. The commands are:

- `mode disengaged`
- `mode power <x>`, `mode current <x>`, `mode velocity <x>`, `mode position <x>`
- `prop mode|current|vcc|temp|position|velocity`
- `cfg get <field>`
- `cfg set <field> <value>`. Field names are those of `servio.map_cfg.iface_names()`.
  The encoder mode takes `analog` or `quad`.
- `cfg commit` stores the current configuration through the storage driver.
  `cfg clear` stores a payload with no registers.
- `info` replies with the dispatcher's `version` and `commit`.

Replies look like `["OK"]`, `["OK",0.000000]` or `["NOK","parse error"]`.

A `Dispatcher` takes the components it works with as plain objects:

- `curr_drv.current`, `vcc_drv.vcc`, `temp_drv.temperature` and `pos_drv.position`
  give raw readings.
- `motor.direction` gives the sign of the current.
- `met.velocity` gives the velocity.
- `stor_drv.store_page(data)` persists a page. It may raise `StorageError`, which
  makes the reply `NOK`.
- Setting configuration also uses `pos_drv.position_range`, `motor.set_invert`,
  `met.set_position_range`, `met.set_moving_step`, `mon.set_minimum_voltage` and
  `mon.set_maximum_temperature`.

## What it does not do

The package has no hardware drivers and no serial or other transport for the
commands. It has no command-line program. It does not include an implementation
of the position metrics (velocity estimation and moving detection) or of the
voltage and temperature monitor. Those, together with the clock, storage and
motor drivers, must be supplied by the caller as objects with the members listed
above.