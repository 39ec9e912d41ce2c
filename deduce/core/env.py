"""
The environment a goal is solved in.

Rules see it through goal.env: the rule list, the configuration, the
auxiliary function specs that may be called, and the entailment backend.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from .config import SynConfig


@dataclass
class Environment:
    rules: list
    config: SynConfig = field(default_factory=SynConfig)
    make_spec: Optional[Callable] = None
    functions: dict = field(default_factory=dict)
    solver: object = None

    def next_rules(self, goal) -> list:
        """Rules to try on goal, in priority order."""
        return self.rules

    def pp(self):
        rules = ", ".join(r.name for r in self.rules)
        funs = ", ".join(sorted(self.functions)) or "none"
        return f"rules: [{rules}]\nfunctions: {funs}"
