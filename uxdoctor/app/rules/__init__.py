from .engine import RuleEngine, evaluate
from .sanity import reconcile

__all__ = [
    "RuleEngine",
    "evaluate",
    "reconcile",
]
