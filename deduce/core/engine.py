"""
The search loop.

One step = check the clock and the target, pop the first open goal from
the boundary, try the rules on it, store what they produce in the memo
table, and push the new subgoals back onto the boundary. The loop knows
nothing about what goals or rules mean.

Termination:
    solved     the target has a fully solved implication
    failed     the target is unsolvable
    exhausted  the boundary ran dry with the target still open
    timeout    config.timeout elapsed since config.start_time
    step limit the optional max_steps cap was reached
"""

from typing import Optional

from .commute import commutation_filter
from .config import print_log
from .goal import Goal
from .state import (
    SearchState, SOLVED, FAILED, EXHAUSTED, TIMEOUT, STEP_LIMIT,
)
from .stats import SynStats
from .rules import apply_rules


def _expand(state: SearchState, goal: Goal) -> list:
    """Run the rules on goal and record the result. Returns new subgoals."""
    config = state.config
    env = goal.env
    if config.print_env and env is not None:
        print_log(config, env.pp(), goal.depth)
    print_log(config, goal.name, goal.depth)

    rules = env.next_rules(goal)
    keep = commutation_filter(goal, env.rules, config) if config.commute else None
    children = apply_rules(rules, goal, config, state.stats, keep=keep)

    if not children:
        state.stats.bump_backtracking()
        print_log(config, "Cannot expand goal: BACKTRACK", goal.depth)

    new_goals = state.table.record(goal, children)
    state.stats.goals += len(new_goals)
    return new_goals


def _revive_deferred(state: SearchState, recheck: bool) -> list:
    """
    Drop settled deferred goals. Only a newly recorded live edge can make a
    goal useful again, so the upward search runs only when recheck is set.
    """
    revived = []
    for goal in list(state.deferred):
        info = state.table[goal]
        if not info.is_open:
            state.deferred.remove(goal)
        elif recheck and not state.table.refresh_useless(goal):
            state.deferred.remove(goal)
            revived.append(goal)
    return revived


def _order_boundary(state: SearchState, new_goals: list):
    boundary = new_goals + state.boundary
    if not state.config.depth_first:
        boundary.sort(key=lambda g: (g.cost, g.depth))
    state.boundary = boundary


def search_step(state: SearchState) -> SearchState:
    """Execute one step of the search loop."""
    if state.halted:
        return state

    config = state.config
    if config.timed_out():
        state.halt(TIMEOUT,
                   f"The derivation took too long: more than {config.timeout} seconds.")
        return state

    target_info = state.table[state.target]
    if target_info.is_solved:
        state.halt(SOLVED, "target solved")
        return state
    if target_info.is_unsolvable:
        state.halt(FAILED, "target unsolvable")
        return state
    if not state.boundary:
        state.halt(EXHAUSTED, "boundary empty")
        return state

    size = len(state.boundary)
    print_log(config, f"\nboundary ({size}): " + " ".join(g.name for g in state.boundary))
    state.stats.update_max_boundary(size)

    goal = state.boundary.pop(0)
    state.step += 1
    state.stats.steps = state.step
    state.stats.update_max_depth(goal.depth)
    print_log(config, f"Goal to expand: {goal.name} (depth: {goal.depth})", goal.depth)

    info = state.table[goal]
    live_edges = state.table.live_edges
    new_goals = []
    if not info.is_open:
        action = "settled"
    elif goal.unsolvable:
        action = "unsolvable"
        state.stats.bump_backtracking()
        state.table.mark_unsolvable(goal)
    elif goal != state.target and state.table.refresh_useless(goal):
        action = "deferred"
        state.deferred.append(goal)
        print_log(config, "Useless goal: deferred", goal.depth, is_fail=True)
    else:
        action = "expanded"
        new_goals = _expand(state, goal)

    if state.deferred:
        recheck = state.table.live_edges != live_edges
        new_goals = new_goals + _revive_deferred(state, recheck)
    _order_boundary(state, new_goals)

    state.history.append({
        "step": state.step,
        "goal": goal.name,
        "depth": goal.depth,
        "action": action,
        "produced": [g.name for g in new_goals],
        "boundary_size": len(state.boundary),
        "table_size": len(state.table),
    })
    return state


def run_search(
    state: SearchState,
    max_steps: Optional[int] = None,
    save_path: Optional[str] = None,
) -> SearchState:
    """
    Run the search loop until it halts.

    Args:
        state:     initial state
        max_steps: safety limit; defaults to config.max_steps
        save_path: if set, checkpoint the state after each step
    """
    if max_steps is None:
        max_steps = state.config.max_steps
    while not state.halted:
        if (max_steps is not None and state.step >= max_steps
                and state.table[state.target].is_open):
            state.halt(STEP_LIMIT, f"max_steps ({max_steps}) reached")
            break
        state = search_step(state)
        if save_path:
            state.save(save_path)
    return state


def synthesize(goal: Goal, stats: Optional[SynStats] = None, **kwargs) -> SearchState:
    """Search for a solution of goal from scratch. kwargs go to run_search."""
    state = SearchState.initial(goal, stats=stats)
    return run_search(state, **kwargs)
