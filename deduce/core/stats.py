"""
Search statistics. Observational only: nothing in the engine reads them back.
"""

from dataclasses import dataclass, asdict


@dataclass
class SynStats:
    rule_apps: int = 0
    backtracks: int = 0
    max_boundary: int = 0
    max_depth: int = 0
    steps: int = 0
    goals: int = 0

    def bump_rule_apps(self):
        self.rule_apps += 1

    def bump_backtracking(self):
        self.backtracks += 1

    def update_max_boundary(self, size: int):
        self.max_boundary = max(self.max_boundary, size)

    def update_max_depth(self, depth: int):
        self.max_depth = max(self.max_depth, depth)

    def to_dict(self):
        return asdict(self)

    def __str__(self):
        return (f"rule applications: {self.rule_apps}, backtracks: {self.backtracks}, "
                f"max boundary: {self.max_boundary}, max depth: {self.max_depth}, "
                f"steps: {self.steps}, goals: {self.goals}")
