"""
Solution extraction and display.

Once the target is marked solved, walk down the edges that closed each
goal and fold the continuations back up into one term.
"""

from .errors import syn_assert
from .goal import Goal
from .memo import GoalTable
from .state import SearchState


def found_solution(state: SearchState) -> bool:
    """Stop condition: is the target solved?"""
    return state.table.is_solved(state.target)


def _edge(table: GoalTable, goal: Goal):
    syn_assert(goal in table and table.is_solved(goal),
               f"cannot extract a solution for unsolved goal {goal.name}")
    edge = table.solution_edge(goal)
    syn_assert(edge is not None and all(table.is_solved(g) for g in edge.subgoals),
               f"solved goal {goal.name} has no fully solved implication")
    return edge


def extract_solution(table: GoalTable, goal: Goal):
    """
    Build the solution term of a solved goal.

    Each goal follows the edge that first closed it, so the walk always
    bottoms out. Shared subgoals are extracted once.
    """
    solutions = {}
    stack = [(goal, False)]
    while stack:
        g, ready = stack.pop()
        if g in solutions:
            continue
        edge = _edge(table, g)
        if ready:
            solutions[g] = edge.kont([solutions[s] for s in edge.subgoals])
            continue
        stack.append((g, True))
        for s in reversed(edge.subgoals):
            if s not in solutions:
                stack.append((s, False))
    return solutions[goal]


def derivation_tree(table: GoalTable, goal: Goal) -> list:
    """
    The derivation that solved goal, as (goal, rule, depth) rows in
    pre-order. depth is the nesting in the tree, not the goal's own depth.
    """
    rows = []
    stack = [(goal, 0)]
    while stack:
        g, depth = stack.pop()
        edge = _edge(table, g)
        rows.append((g, edge.rule, depth))
        for s in reversed(edge.subgoals):
            stack.append((s, depth + 1))
    return rows


def print_derivation(state: SearchState):
    """Pretty-print the derivation tree."""
    if not found_solution(state):
        print("No derivation found.")
        return
    print(f"\n{'='*60}")
    print("DERIVATION")
    print(f"{'='*60}")
    for i, (goal, rule, depth) in enumerate(derivation_tree(state.table, state.target)):
        indent = "  " * depth
        print(f"  {i+1}. {indent}[{rule}] {goal.name}")
    print(f"{'='*60}")
