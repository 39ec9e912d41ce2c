"""
Terms, substitution and restricted unification.

Terms:
    str starting with uppercase -> variable:  "X", "Tmp2"
    int or lowercase str        -> constant:  0, 1, "null"
    tuple                       -> function:  ("plus", "X", 1)

Substitutions are plain dicts: {"Z": "A", "W": ("plus", "A", 1)}

Unification only binds variables from an explicit set. Rules use it to
instantiate the existential variables of a postcondition without ever
touching program variables or ghosts.
"""


def is_variable(term) -> bool:
    """Variables start with uppercase. Everything else is a constant or function."""
    return isinstance(term, str) and len(term) > 0 and term[0].isupper()


def is_function(term) -> bool:
    """Functions are tuples: (name, arg1, arg2, ...)."""
    return isinstance(term, tuple)


def occurs_in(var, term) -> bool:
    """Does variable var occur anywhere in term? Prevents infinite substitutions."""
    if var == term:
        return True
    if is_function(term):
        return any(occurs_in(var, arg) for arg in term[1:])
    return False


def term_vars(term) -> frozenset:
    if is_variable(term):
        return frozenset({term})
    if is_function(term):
        return frozenset().union(*(term_vars(arg) for arg in term[1:]))
    return frozenset()


def tuple_vars(items) -> frozenset:
    """Variables of a collection of (tag, arg1, arg2, ...) tuples."""
    result = set()
    for item in items:
        for arg in item:
            result |= term_vars(arg)
    return frozenset(result)


def apply_substitution(sub: dict, term):
    """Apply a substitution dict to a single term. Follows chains."""
    if is_variable(term):
        if term in sub:
            return apply_substitution(sub, sub[term])
        return term
    if is_function(term):
        return tuple([term[0]] + [apply_substitution(sub, arg) for arg in term[1:]])
    return term  # constant


def apply_sub_to_tuple(sub: dict, item: tuple, skip: int = 1) -> tuple:
    """Apply substitution to the arguments of (tag..., arg1, arg2, ...)."""
    return item[:skip] + tuple(apply_substitution(sub, arg) for arg in item[skip:])


def apply_sub_to_set(sub: dict, items, skip: int = 1) -> frozenset:
    return frozenset(apply_sub_to_tuple(sub, item, skip) for item in items)


def unify_terms(t1, t2, bindable, sub=None):
    """
    Unify two terms, binding only variables in bindable.

    Returns the updated substitution dict, or None if unification fails.
    Robinson's algorithm with occurs check.
    """
    if sub is None:
        sub = {}

    t1 = apply_substitution(sub, t1)
    t2 = apply_substitution(sub, t2)

    if t1 == t2:
        return sub
    if is_variable(t1) and t1 in bindable:
        if occurs_in(t1, t2):
            return None
        return {**sub, t1: t2}
    if is_variable(t2) and t2 in bindable:
        if occurs_in(t2, t1):
            return None
        return {**sub, t2: t1}
    if is_function(t1) and is_function(t2):
        if t1[0] != t2[0] or len(t1) != len(t2):
            return None
        for a1, a2 in zip(t1[1:], t2[1:]):
            sub = unify_terms(a1, a2, bindable, sub)
            if sub is None:
                return None
        return sub
    return None


def pp_term(term) -> str:
    if is_function(term):
        if term[0] == "plus" and len(term) == 3:
            return f"({pp_term(term[1])} + {pp_term(term[2])})"
        return f"{term[0]}({', '.join(pp_term(a) for a in term[1:])})"
    return str(term)
