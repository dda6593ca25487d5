"""Time-based id generation."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class IdGenerator:
    """Issues strictly increasing integer ids derived from the wall clock.

    Ids are the current time in milliseconds unless that would not exceed the
    last issued id, in which case the last id plus one is used.
    """

    clock: Callable[[], int] = field(default=_now_ms)
    last_id: int = 0

    def next_id(self) -> int:
        """Return a new id greater than every id issued or observed so far."""
        candidate = max(self.clock(), self.last_id + 1)
        self.last_id = candidate
        return candidate

    def observe(self, value: int) -> None:
        """Make sure future ids stay above an id created elsewhere."""
        if value > self.last_id:
            self.last_id = value
