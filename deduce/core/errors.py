"""
Errors raised by the search engine.

Only invariant violations are exceptions. Running out of time or out of
goals is an ordinary outcome of the search and is reported through
SearchState, not raised.
"""


class SynthesisError(Exception):
    """A broken engine invariant. Continuing could yield an unsound term."""


def syn_assert(assertion: bool, msg: str):
    if not assertion:
        raise SynthesisError(msg)
