"""
Full state of the search loop.

boundary:  open goals waiting to be expanded (the frontier)
deferred:  goals popped while useless; revived if they become useful
table:     the AND/OR memo table (see memo.py)
history:   log of what happened at each step

The state can be dumped to JSON for inspection. It cannot be reloaded:
the continuations stored on the edges are closures.
"""

import json
from dataclasses import dataclass, field
from typing import Optional

from .config import SynConfig
from .goal import Goal
from .memo import GoalTable
from .stats import SynStats


OPEN = "open"
SOLVED = "solved"
FAILED = "failed"
EXHAUSTED = "exhausted"
TIMEOUT = "timeout"
STEP_LIMIT = "step limit"


@dataclass
class SearchState:
    target: Goal
    table: GoalTable
    config: SynConfig = field(default_factory=SynConfig)
    stats: SynStats = field(default_factory=SynStats)
    boundary: list = field(default_factory=list)
    deferred: list = field(default_factory=list)
    history: list = field(default_factory=list)
    step: int = 0
    halted: bool = False
    halt_reason: str = ""
    outcome: str = OPEN

    @classmethod
    def initial(cls, goal: Goal, config: Optional[SynConfig] = None,
                stats: Optional[SynStats] = None) -> "SearchState":
        if config is None:
            config = getattr(goal.env, "config", None) or SynConfig()
        state = cls(
            target=goal,
            table=GoalTable(goal),
            config=config,
            stats=stats if stats is not None else SynStats(),
            boundary=[goal],
        )
        state.stats.goals = 1
        return state

    def halt(self, outcome: str, reason: str):
        self.halted = True
        self.outcome = outcome
        self.halt_reason = reason

    @property
    def solved(self) -> bool:
        return self.outcome == SOLVED

    def to_dict(self):
        def status(info):
            if info.is_solved:
                return SOLVED
            if info.is_unsolvable:
                return "unsolvable"
            return "useless" if info.is_useless else OPEN

        return {
            "target": self.target.name,
            "boundary": [g.name for g in self.boundary],
            "deferred": [g.name for g in self.deferred],
            "goals": {g.name: status(self.table[g]) for g in self.table},
            "history": self.history,
            "step": self.step,
            "halted": self.halted,
            "halt_reason": self.halt_reason,
            "outcome": self.outcome,
            "stats": self.stats.to_dict(),
            "config": self.config.to_dict(),
        }

    def save(self, path="deduce_state.json"):
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)
