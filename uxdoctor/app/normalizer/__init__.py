from .converter import count_nodes, normalize
from .key_flow import infer_action_element, infer_key_user_flow

__all__ = [
    "count_nodes",
    "normalize",
    "infer_action_element",
    "infer_key_user_flow",
]
