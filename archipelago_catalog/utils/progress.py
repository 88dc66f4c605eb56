from __future__ import annotations

from dataclasses import dataclass
from typing import Callable


@dataclass
class EveryN:
    """
    Count events (cache hits, API calls) and invoke a callback on every N-th one.
    """

    every_n: int
    callback: Callable[[], None]
    count: int = 0

    def tick(self) -> int:
        self.count += 1
        if self.every_n > 0 and self.count % self.every_n == 0:
            self.callback()
        return self.count
