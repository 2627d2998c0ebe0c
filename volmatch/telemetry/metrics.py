from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from .logger import get_logger


log = get_logger("metrics")


def counter(name: str, value: int = 1, **labels: str) -> None:
    log.debug("metric.counter", metric=name, value=value, **labels)


@contextmanager
def timer(name: str, **labels: str) -> Iterator[None]:
    started = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        log.debug("metric.timer", metric=name, elapsed_ms=round(elapsed_ms, 3), **labels)
