from .prioritizer import is_key_action_related, prioritize
from .scorer import DIMENSIONS, attribute_dimension, score

__all__ = [
    "DIMENSIONS",
    "attribute_dimension",
    "is_key_action_related",
    "prioritize",
    "score",
]
