"""Context classification: where the user currently is."""

from .classifier import PROMPT_FILETYPES, ContextClassifier
from .completion import (
    AUTO,
    KNOWN_ENGINES,
    CompletionEngine,
    CompletionPredicate,
    build_completion_predicate,
)
from .situation import Situation

__all__ = [
    "Situation",
    "ContextClassifier",
    "PROMPT_FILETYPES",
    "AUTO",
    "KNOWN_ENGINES",
    "CompletionEngine",
    "CompletionPredicate",
    "build_completion_predicate",
]
