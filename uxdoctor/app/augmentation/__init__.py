from .augmenter import SemanticAugmenter
from .json_extraction import extract_json, parse_candidate_issues
from .llm_client import (
    ChatClient,
    FallbackLLMClient,
    LLMClient,
    LLMCompletion,
    OpenAICompatibleClient,
    build_llm_client,
)

__all__ = [
    "SemanticAugmenter",
    "extract_json",
    "parse_candidate_issues",
    "ChatClient",
    "FallbackLLMClient",
    "LLMClient",
    "LLMCompletion",
    "OpenAICompatibleClient",
    "build_llm_client",
]
