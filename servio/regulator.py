"""Linear transition between two scaling points over time."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class LinearTransitionRegulator:
    """Moves ``state`` towards ``high_point`` while still and ``low_point`` while moving."""

    low_point: float = 1.0
    high_point: float = 2.0
    decay: float = 1.0
    last_time: int = 0
    state: float = field(init=False)

    def __post_init__(self) -> None:
        self.state = self.low_point

    def set_config(self, scale: float, decay: float) -> None:
        """Set the high point and the decay given per second."""
        self.high_point = scale
        self.decay = decay / 1_000_000.0

    def update(self, now: int, is_moving: bool) -> None:
        """Advance the state to ``now`` (microseconds)."""
        tdiff = now - self.last_time
        direction = -1.0 if is_moving else 1.0
        step = self.decay * float(tdiff)
        self.state = max(self.low_point, min(self.state + direction * step, self.high_point))
        self.last_time = now