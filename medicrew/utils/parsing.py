"""
Shared text parsing utilities for LLM response extraction.

Every workflow stage and portal service reduces free-text LLM output to a
typed record through `parse_structured`: find the first JSON object in the
text, validate it against a schema, and fall back to a default otherwise.
"""

import json
import logging
import re
from typing import Callable, Optional, TypeVar, Union

from pydantic import BaseModel, ValidationError


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)
_BRACED_BLOCK = re.compile(r"\{.*\}", re.DOTALL)


def extract_json_object(content: Optional[str]) -> Optional[dict]:
    """
    Extract the first JSON object embedded in free text.

    Tries, in order: a ```json fenced block, the span from the first "{"
    to the last "}", and finally a decode that starts at the first "{"
    and ignores whatever trails the object.

    Args:
        content: Raw LLM response text

    Returns:
        The decoded object, or None if no JSON object could be decoded
    """
    if not content:
        return None

    candidates = []
    fenced = _FENCED_JSON.search(content)
    if fenced:
        candidates.append(fenced.group(1))
    braced = _BRACED_BLOCK.search(content)
    if braced:
        candidates.append(braced.group(0))

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed

    start = content.find("{")
    if start == -1:
        return None
    try:
        parsed, _ = json.JSONDecoder().raw_decode(content[start:])
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _alias_keys(schema: type[BaseModel], payload: dict) -> dict:
    """Rename field-name keys to their aliases, recursing into nested models."""
    fields = {}
    for name, field in schema.model_fields.items():
        fields[name] = field
        if field.alias:
            fields[field.alias] = field

    renamed = {}
    for key, value in payload.items():
        field = fields.get(key)
        if field is None:
            renamed[key] = value
            continue
        alias = field.alias or key
        # The aliased spelling wins when a reply carries both
        if alias != key and alias in payload:
            continue
        annotation = field.annotation
        if isinstance(value, dict) and isinstance(annotation, type) and issubclass(annotation, BaseModel):
            value = _alias_keys(annotation, value)
        renamed[alias] = value
    return renamed


def _merge_missing(base: dict, payload: dict) -> dict:
    """Overlay payload onto base, recursing into dicts and skipping nulls."""
    merged = dict(base)
    for key, value in payload.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_missing(merged[key], value)
        else:
            merged[key] = value
    return merged


def parse_structured(
    content: Optional[str],
    schema: type[T],
    default: Union[T, Callable[[], T], None] = None,
    fill_missing: bool = False,
) -> Optional[T]:
    """
    Parse an LLM response into a schema, or return a default.

    Missing JSON and schema validation failures are treated the same way:
    the default is returned and a warning is logged. This never raises.

    Args:
        content: Raw LLM response text
        schema: Pydantic model to validate against
        default: Fallback record, or a zero-argument factory for one
        fill_missing: If True, fields absent (or null) in the JSON are
            taken from the default before validation, so partially valid
            output keeps what it got right

    Returns:
        Validated schema instance, or the default
    """
    if callable(default) and not isinstance(default, BaseModel):
        default = default()

    payload = extract_json_object(content)
    if payload is None:
        logger.warning(f"No JSON object found for {schema.__name__}, using fallback")
        return default

    if fill_missing and default is not None:
        # The default dumps by alias, so the reply must be keyed the same way
        payload = _alias_keys(schema, payload)
        payload = _merge_missing(default.model_dump(mode="json", by_alias=True), payload)

    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        logger.warning(
            f"{schema.__name__} failed validation ({e.error_count()} errors), using fallback"
        )
        return default


def extract_labelled_list(content: str, labels: list[str]) -> list[str]:
    """
    Pull a comma/semicolon separated list following a label.

    Matches lines like "Red flags: chest pain, sweating; dizziness".

    Args:
        content: Text to search
        labels: Label regexes to try in priority order

    Returns:
        List of stripped, non-empty items (empty if no label matched)
    """
    for label in labels:
        match = re.search(rf"{label}:?\s*([^\n]+)", content, re.IGNORECASE)
        if match:
            items = re.split(r"[,;]", match.group(1))
            return [item.strip(" *-.") for item in items if item.strip(" *-.")]
    return []
