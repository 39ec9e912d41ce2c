"""
The driver: from a function specification to procedures.

Runs the search for a function specification and turns the outcome into
either procedures or a diagnostic on stderr.
"""

import sys
from dataclasses import replace
from typing import Optional

from .core.config import print_log
from .core.engine import run_search
from .core.env import Environment
from .core.goal import Goal
from .core.proof import extract_solution
from .core.state import SearchState, SOLVED, TIMEOUT
from .core.stats import SynStats
from .language import FunSpec, Procedure, Solution


def top_level_goal(fun_spec: FunSpec, env: Environment) -> Goal:
    spec = env.make_spec(fun_spec) if env.make_spec else fun_spec
    return Goal.root(spec, env)


def run_synthesis(fun_spec: FunSpec, env: Environment,
                  stats: Optional[SynStats] = None, **kwargs) -> SearchState:
    """
    Run the search for fun_spec and return the final state.

    The run gets its own copy of env.config, so the clock starts afresh for
    every run unless the caller already started it on env.config.
    """
    config = replace(env.config)
    if config.start_time is None:
        config.start()
    goal = top_level_goal(fun_spec, env)
    print_log(config, ["Initial specification:", goal.name + "\n"])
    if env.solver is not None:
        env.solver.init()
    state = SearchState.initial(goal, config=config, stats=stats)
    return run_search(state, **kwargs)


def procedures(fun_spec: FunSpec, state: SearchState) -> list:
    """The main procedure and its helpers, from a solved state."""
    solution = extract_solution(state.table, state.target)
    if not isinstance(solution, Solution):
        solution = Solution(solution)
    main = Procedure(fun_spec.name, fun_spec.tp, fun_spec.formals, solution.stmt)
    return [main] + list(solution.helpers)


def failure_message(state: SearchState) -> str:
    if state.outcome == TIMEOUT:
        return state.halt_reason
    return (f"Deductive synthesis failed for the goal\n {state.target.name}\n"
            f" ({state.halt_reason})")


def synthesize_proc(fun_spec: FunSpec, env: Environment,
                    stats: Optional[SynStats] = None, **kwargs):
    """
    Synthesize a body for fun_spec.

    Returns ([main, *helpers], stats), or None after printing why no
    program was found.
    """
    state = run_synthesis(fun_spec, env, stats=stats, **kwargs)
    if state.outcome == SOLVED:
        return procedures(fun_spec, state), state.stats
    print(failure_message(state), file=sys.stderr)
    return None
