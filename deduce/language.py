"""
Function specifications, procedures, and the statements rules build.

Solution terms produced by continuations are Solution values: a statement
plus any helper procedures introduced along the way.
"""

from dataclasses import dataclass, field

from .logic.unification import pp_term


@dataclass(frozen=True)
class FunSpec:
    """A procedure to synthesize: signature plus pre/postcondition."""
    name: str
    tp: str
    formals: tuple      # ((name, type), ...)
    pre: object
    post: object

    @property
    def formal_names(self):
        return tuple(name for name, _ in self.formals)


# ── Statements ───────────────────────────────────────────────────────────────

class Statement:
    def pp_lines(self) -> list:
        return [self.pp()]

    def pp(self) -> str:
        return "\n".join(self.pp_lines())


@dataclass(frozen=True)
class Skip(Statement):
    def pp(self):
        return "skip;"


@dataclass(frozen=True)
class Error(Statement):
    def pp(self):
        return "error;"


def _loc(loc, offset):
    return pp_term(loc) if offset == 0 else f"({pp_term(loc)} + {offset})"


@dataclass(frozen=True)
class Load(Statement):
    to: str
    loc: object
    offset: int = 0

    def pp(self):
        return f"let {self.to} = *{_loc(self.loc, self.offset)};"


@dataclass(frozen=True)
class Store(Statement):
    loc: object
    offset: int
    value: object

    def pp(self):
        return f"*{_loc(self.loc, self.offset)} = {pp_term(self.value)};"


@dataclass(frozen=True)
class Free(Statement):
    loc: object

    def pp(self):
        return f"free({pp_term(self.loc)});"


@dataclass(frozen=True)
class Call(Statement):
    fun: str
    args: tuple

    def pp(self):
        return f"{self.fun}({', '.join(pp_term(a) for a in self.args)});"


@dataclass(frozen=True)
class Seq(Statement):
    first: Statement
    rest: Statement

    def pp_lines(self):
        return self.first.pp_lines() + self.rest.pp_lines()


def seq(first: Statement, rest: Statement) -> Statement:
    """Sequence two statements, dropping a trailing skip."""
    if isinstance(rest, Skip):
        return first
    if isinstance(first, Skip):
        return rest
    return Seq(first, rest)


# ── Procedures and solutions ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Procedure:
    name: str
    tp: str
    formals: tuple
    body: Statement

    def pp(self):
        params = ", ".join(f"{tp} {name}" for name, tp in self.formals)
        body = "\n".join("  " + line for line in self.body.pp_lines())
        return f"{self.tp} {self.name}({params}) {{\n{body}\n}}"


@dataclass(frozen=True)
class Solution:
    stmt: object
    helpers: tuple = field(default=())


def prepend(stmt: Statement):
    """Continuation: run stmt, then the single subgoal's solution."""
    def kont(sols):
        (sol,) = sols
        return Solution(seq(stmt, sol.stmt), sol.helpers)
    return kont


def identity(sols):
    """Continuation for rules that emit no code."""
    (sol,) = sols
    return sol


def constant(stmt: Statement):
    """Continuation for leaf rules."""
    def kont(sols):
        return Solution(stmt)
    return kont
