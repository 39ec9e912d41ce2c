from .unification import (
    is_variable, is_function, occurs_in, term_vars, tuple_vars,
    apply_substitution, apply_sub_to_tuple, apply_sub_to_set,
    unify_terms, pp_term,
)
from .entailment import PureEntailment

__all__ = [
    "is_variable", "is_function", "occurs_in", "term_vars", "tuple_vars",
    "apply_substitution", "apply_sub_to_tuple", "apply_sub_to_set",
    "unify_terms", "pp_term",
    "PureEntailment",
]
