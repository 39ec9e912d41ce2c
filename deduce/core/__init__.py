from .errors import SynthesisError, syn_assert
from .config import SynConfig, print_log
from .stats import SynStats
from .goal import Goal, RuleApplication
from .rules import Rule, Subderivation, rule, apply_rules
from .env import Environment
from .memo import GoalInfo, GoalsImplication, GoalTable
from .commute import out_of_order, goal_out_of_order, commutation_filter
from .state import SearchState, OPEN, SOLVED, FAILED, EXHAUSTED, TIMEOUT, STEP_LIMIT
from .engine import search_step, run_search, synthesize
from .proof import found_solution, extract_solution, derivation_tree, print_derivation

__all__ = [
    "SynthesisError", "syn_assert",
    "SynConfig", "print_log", "SynStats",
    "Goal", "RuleApplication", "Environment",
    "Rule", "Subderivation", "rule", "apply_rules",
    "GoalInfo", "GoalsImplication", "GoalTable",
    "out_of_order", "goal_out_of_order", "commutation_filter",
    "SearchState", "OPEN", "SOLVED", "FAILED", "EXHAUSTED", "TIMEOUT", "STEP_LIMIT",
    "search_step", "run_search", "synthesize",
    "found_solution", "extract_solution", "derivation_tree", "print_derivation",
]
