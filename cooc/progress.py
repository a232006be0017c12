from __future__ import annotations

import logging

_UNITS = ((1e9, "G"), (1e6, "M"), (1e3, "K"))


def unitize(n: int) -> str:
    for scale, suffix in _UNITS:
        if n >= scale:
            return f"{n / scale:.0f} {suffix}"
    return str(n)


class ProgressCounter:
    """Log progress at an exponentially decreasing rate."""

    def __init__(self, log: logging.Logger, message: str = "Line"):
        self.log = log
        self.message = message
        self.n = 0
        self.step_size = 1000

    def step(self) -> None:
        if self.n % self.step_size == 0:
            self.log.info("%s %s", self.message, unitize(self.n))
            if self.n // self.step_size >= 5:
                self.step_size *= 10
        self.n += 1
