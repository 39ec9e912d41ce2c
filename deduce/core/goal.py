"""
Goals: the nodes of the AND/OR search graph.

A goal wraps a domain specification (any hashable value) together with
the bookkeeping the scheduler needs. Nothing in here depends on the rest
of the engine.

Identity is the spec and nothing else. Two goals reached along different
derivations are the same node as far as memoization is concerned, whatever
their depth and history.

The spec may optionally provide:
    name           -- str used in traces
    cost           -- nonnegative scheduling priority, lower is tried first
    is_unsolvable  -- bool, True when no rule could ever close the goal
"""

import math
from dataclasses import dataclass
from typing import Optional

from .errors import syn_assert


@dataclass(frozen=True)
class RuleApplication:
    """
    One step in a derivation history.

    consumed: the part of the parent spec the rule read or replaced
    produced: the part of the child spec the rule introduced
    """
    rule: str
    consumed: frozenset = frozenset()
    produced: frozenset = frozenset()

    @property
    def footprint(self) -> frozenset:
        return self.consumed | self.produced

    def pp(self):
        used = ", ".join(sorted(map(str, self.consumed)))
        return f"{self.rule}({used})"


def _spec_cost(spec):
    return getattr(spec, "cost", 0)


def _spec_name(spec):
    return getattr(spec, "name", None) or str(spec)


@dataclass
class Goal:
    """A pending proof obligation. Never mutated after creation."""
    spec: object
    env: object = None
    depth: int = 0
    cost: float = 0
    history: tuple = ()
    unsolvable: bool = False

    def __post_init__(self):
        syn_assert(isinstance(self.cost, (int, float)) and not math.isnan(self.cost)
                   and self.cost >= 0,
                   f"invalid goal cost {self.cost!r} for {self.name}")

    @classmethod
    def root(cls, spec, env=None) -> "Goal":
        return cls(spec=spec, env=env, depth=0, cost=_spec_cost(spec),
                   unsolvable=bool(getattr(spec, "is_unsolvable", False)))

    def spawn(self, spec, application: Optional[RuleApplication] = None) -> "Goal":
        """A subgoal one level deeper, remembering how it was reached."""
        history = self.history + (application,) if application else self.history
        return Goal(
            spec=spec,
            env=self.env,
            depth=self.depth + 1,
            cost=_spec_cost(spec),
            history=history,
            unsolvable=bool(getattr(spec, "is_unsolvable", False)),
        )

    @property
    def name(self):
        return _spec_name(self.spec)

    @property
    def last_application(self) -> Optional[RuleApplication]:
        return self.history[-1] if self.history else None

    def pp(self):
        return f"{self.name} (depth {self.depth}, cost {self.cost})"

    def __hash__(self):
        return hash(self.spec)

    def __eq__(self, other):
        return isinstance(other, Goal) and self.spec == other.spec

    def __repr__(self):
        return f"Goal({self.name})"
