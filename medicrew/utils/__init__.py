"""Utility functions and helpers."""

from medicrew.utils.parsing import (
    extract_json_object,
    extract_labelled_list,
    parse_structured,
)
from medicrew.utils.protocols import LLMClientProtocol

__all__ = [
    "extract_json_object",
    "extract_labelled_list",
    "parse_structured",
    "LLMClientProtocol",
]
