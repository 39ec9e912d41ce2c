"""
Search configuration and trace output.

SynConfig is consumed, not owned, by the engine: the driver and the CLI
build one, the scheduler reads it. Tracing flags only ever change what
gets printed.
"""

import time
from dataclasses import dataclass, asdict, fields
from typing import Optional


@dataclass
class SynConfig:
    """
    depth_first:        boundary ordering; False means best-first by cost
    commute:            enable commutation pruning
    invert:             stop trying rules after an invertible rule applies
    timeout:            seconds allowed after start_time
    start_time:         time.monotonic() at which the clock started
    max_steps:          optional cap on scheduler steps
    print_derivations:  trace every step
    print_failed:       also trace rules that did not apply
    print_env:          also print the environment of each expanded goal
    """
    depth_first: bool = False
    commute: bool = True
    invert: bool = True
    timeout: float = 120.0
    start_time: Optional[float] = None
    max_steps: Optional[int] = None
    print_derivations: bool = False
    print_failed: bool = False
    print_env: bool = False

    def start(self, now: Optional[float] = None) -> "SynConfig":
        self.start_time = time.monotonic() if now is None else now
        return self

    def elapsed(self, now: Optional[float] = None) -> float:
        if self.start_time is None:
            return 0.0
        if now is None:
            now = time.monotonic()
        return now - self.start_time

    def timed_out(self, now: Optional[float] = None) -> bool:
        """An unstarted clock never times out."""
        return self.start_time is not None and self.elapsed(now) > self.timeout

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, d):
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in known})


def _indent(depth: int) -> str:
    return "|  " * depth if depth > 0 else ""


def print_log(config: SynConfig, lines, depth: int = 0, is_fail: bool = False):
    """
    Print trace lines when derivation printing is on.

    Failure lines (rules that did not apply, pruned alternatives) need
    print_failed as well. Multi-line strings keep the indentation.
    """
    if not config.print_derivations:
        return
    if is_fail and not config.print_failed:
        return
    if isinstance(lines, str):
        lines = [lines]
    prefix = _indent(depth)
    for line in lines:
        if not line.strip():
            continue
        print(prefix + line.replace("\n", "\n" + prefix))
