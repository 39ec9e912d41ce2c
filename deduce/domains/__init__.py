"""
Domain registry.

Each domain is a dict describing how to set up a synthesis environment:
    rules:        list[Rule], in priority order
    make_spec:    (FunSpec) -> hashable goal spec
    make_solver:  () -> entailment backend with init()
    examples:     {name: FunSpec}
    description:  str
"""

from .heap import HEAP_RULES, HEAP_EXAMPLES, make_heap_spec
from ..core.config import SynConfig
from ..core.env import Environment
from ..logic.entailment import PureEntailment


DOMAINS = {
    "heap": {
        "rules":       HEAP_RULES,
        "make_spec":   make_heap_spec,
        "make_solver": PureEntailment,
        "examples":    HEAP_EXAMPLES,
        "description": "Points-to heaps: reads, writes, frees over single cells",
    },
}


def make_env(domain: str = "heap", config: SynConfig = None, functions=None) -> Environment:
    d = DOMAINS[domain]
    return Environment(
        rules=list(d["rules"]),
        config=config if config is not None else SynConfig(),
        make_spec=d["make_spec"],
        functions=dict(functions or {}),
        solver=d["make_solver"](),
    )
