"""
Deduce: a goal-resolution search engine for deductive program synthesis.

Inference rules rewrite a goal into subgoals plus a continuation that
builds the goal's solution from theirs. The engine schedules goals,
shares structurally equal ones in an AND/OR memo table, prunes
derivations that only differ by the order of independent rule
applications, and extracts the program once the top goal is solved.

Usage:
    python -m deduce --list
    python -m deduce --example swap
    python -m deduce --example copy --trace --print-failed
    python -m deduce --example unreachable      (exits with status 1)
"""

from .core.errors import SynthesisError
from .core.config import SynConfig
from .core.stats import SynStats
from .core.goal import Goal, RuleApplication
from .core.env import Environment
from .core.rules import Rule, Subderivation, rule, apply_rules
from .core.memo import GoalInfo, GoalsImplication, GoalTable
from .core.state import SearchState
from .core.engine import search_step, run_search, synthesize
from .core.proof import found_solution, extract_solution, print_derivation
from .language import FunSpec, Procedure, Solution
from .synthesis import synthesize_proc, run_synthesis
from .domains import DOMAINS, make_env

__all__ = [
    "SynthesisError", "SynConfig", "SynStats",
    "Goal", "RuleApplication", "Environment",
    "Rule", "Subderivation", "rule", "apply_rules",
    "GoalInfo", "GoalsImplication", "GoalTable",
    "SearchState", "search_step", "run_search", "synthesize",
    "found_solution", "extract_solution", "print_derivation",
    "FunSpec", "Procedure", "Solution",
    "synthesize_proc", "run_synthesis",
    "DOMAINS", "make_env",
]
