"""
Visualization and reporting utilities.
"""

from .core.state import SearchState


def _status(info):
    if info.is_solved:
        return "solved"
    if info.is_unsolvable:
        return "unsolvable"
    return "useless" if info.is_useless else "open"


def print_state(state: SearchState):
    """Print a summary of the current search state."""
    counts = state.table.counts()
    print(f"\n{'='*60}")
    print(f"Step: {state.step}  Outcome: {state.outcome}")
    print(f"Goals: {counts['goals']} (solved {counts['solved']}, "
          f"unsolvable {counts['unsolvable']}, open {counts['open']})")
    print(f"Boundary ({len(state.boundary)}):")
    for goal in state.boundary:
        print(f"  [cost {goal.cost}, depth {goal.depth}] {goal.name}")
    if state.deferred:
        print(f"Deferred ({len(state.deferred)}):")
        for goal in state.deferred:
            print(f"  {goal.name}")
    print(f"{'='*60}")


def print_history(state: SearchState):
    """Print what each step did."""
    print(f"\n{'='*60}")
    print("Search history:")
    print(f"{'='*60}")
    for entry in state.history:
        produced = ", ".join(entry["produced"]) if entry["produced"] else "(nothing new)"
        print(f"  Step {entry['step']}: {entry['action']} {entry['goal']} -> {produced}")


def export_dot(state: SearchState, path="deduce_graph.dot"):
    """Export the AND/OR graph as a DOT file for Graphviz visualization."""
    colors = {"solved": "palegreen", "unsolvable": "lightpink",
              "useless": "lightgray", "open": "lightblue"}
    table = state.table
    ids = {goal: f"g{i}" for i, goal in enumerate(table)}
    with open(path, "w") as f:
        f.write("digraph deduce {\n")
        f.write("  node [shape=box, style=rounded];\n")
        for goal, node in ids.items():
            label = goal.name.replace('"', '\\"')
            color = colors[_status(table[goal])]
            f.write(f'  {node} [label="{label}", fillcolor={color}, style=filled];\n')
        n = 0
        for goal, edges in table.implications.items():
            for edge in edges:
                edge_id = f"e{n}"
                n += 1
                bold = ", penwidth=2" if table.solution_edge(goal) is edge else ""
                f.write(f'  {edge_id} [shape=point, xlabel="{edge.rule}"];\n')
                f.write(f"  {ids[goal]} -> {edge_id} [arrowhead=none{bold}];\n")
                for sub in edge.subgoals:
                    f.write(f"  {edge_id} -> {ids[sub]};\n")
        f.write("}\n")
    print(f"Graph exported to {path}")
