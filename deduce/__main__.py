"""
CLI entry point. Run as: python -m deduce --example <name>
"""

import argparse
import sys

from .core.config import SynConfig
from .core.proof import print_derivation
from .domains import DOMAINS, make_env
from .synthesis import run_synthesis, procedures, failure_message
from .visualization import print_state, print_history, export_dot


def build_config(args) -> SynConfig:
    return SynConfig(
        depth_first=args.depth_first,
        commute=not args.no_commute,
        invert=not args.no_invert,
        timeout=args.timeout,
        max_steps=args.max_steps,
        print_derivations=args.trace,
        print_failed=args.print_failed,
        print_env=args.print_env,
    )


def main(argv=None):
    parser = argparse.ArgumentParser(description="Deductive synthesis by goal resolution")
    parser.add_argument("--domain", choices=list(DOMAINS.keys()), default="heap",
                        help="Which rule domain to use")
    parser.add_argument("--example", default="swap", help="Which example to synthesize")
    parser.add_argument("--list", action="store_true", help="List examples and exit")
    parser.add_argument("--timeout", type=float, default=120.0, help="Timeout in seconds")
    parser.add_argument("--max-steps", type=int, default=None, help="Max scheduler steps")
    parser.add_argument("--depth-first", action="store_true", help="Depth-first boundary")
    parser.add_argument("--no-commute", action="store_true", help="Disable commutation pruning")
    parser.add_argument("--no-invert", action="store_true",
                        help="Keep trying rules after an invertible one applies")
    parser.add_argument("--trace", action="store_true", help="Print every derivation step")
    parser.add_argument("--print-failed", action="store_true", help="Also trace failed rules")
    parser.add_argument("--print-env", action="store_true", help="Also trace environments")
    parser.add_argument("--dot", type=str, default=None, help="Export AND/OR graph to file")
    parser.add_argument("--save", type=str, default=None, help="Save final state to file")
    parser.add_argument("--quiet", action="store_true", help="Less output")
    args = parser.parse_args(argv)

    examples = DOMAINS[args.domain]["examples"]
    if args.list:
        for name, spec in examples.items():
            print(f"  {name}: {spec.pre.name} -> {spec.post.name}")
        return 0
    if args.example not in examples:
        parser.error(f"unknown example {args.example!r}; use --list")

    fun_spec = examples[args.example]
    env = make_env(args.domain, build_config(args))
    print(f"Domain: {args.domain}  Example: {args.example}")

    try:
        state = run_synthesis(fun_spec, env)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 1

    if not args.quiet:
        print_state(state)
        print_history(state)
        print_derivation(state)
    if args.dot:
        export_dot(state, args.dot)
    if args.save:
        state.save(args.save)
        print(f"State saved to {args.save}")

    if not state.solved:
        print(failure_message(state), file=sys.stderr)
        return 1
    for proc in procedures(fun_spec, state):
        print(proc.pp())
    print(f"\n{state.stats}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
