"""
Turn an upstream reply into a CodeBundle.

Extraction walks EXTRACTION_STRATEGIES in order and stops at the first one
that finds text; if none does, the whole reply is serialised instead. The
text is then parsed as JSON, falling back to the first greedy {...} block.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple


BUNDLE_KEYS = ("html", "css", "js")
JSON_BLOCK_RE = re.compile(r"\{[\s\S]*\}")


@dataclass(frozen=True)
class CodeBundle:
    html: str = ""
    css: str = ""
    js: str = ""

    def to_dict(self) -> dict:
        return {"html": self.html, "css": self.css, "js": self.js}


class ModelOutputError(Exception):
    """The model reply could not be turned into a JSON object."""

    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.message = message
        self.raw = raw


def _first_content(items: Any) -> Optional[Any]:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0].get("content") or None
    return None


def output_content(data: Any) -> Optional[Any]:
    if isinstance(data, dict):
        return _first_content(data.get("output"))
    return None


def candidates_content(data: Any) -> Optional[Any]:
    if isinstance(data, dict):
        return _first_content(data.get("candidates"))
    return None


def text_field(data: Any) -> Optional[Any]:
    if isinstance(data, dict) and isinstance(data.get("text"), str):
        return data["text"]
    return None


def raw_string(data: Any) -> Optional[Any]:
    return data if isinstance(data, str) else None


EXTRACTION_STRATEGIES: List[Tuple[str, Callable[[Any], Optional[Any]]]] = [
    ("output_content", output_content),
    ("candidates_content", candidates_content),
    ("text_field", text_field),
    ("raw_string", raw_string),
]


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value)


def extract_text(data: Any) -> Tuple[str, str]:
    """
    Return (strategy name, generated text) for an upstream reply.

    Content that is not a string (e.g. a structured parts object) is not model
    text and raises ModelOutputError with the serialised content as raw.
    """
    for name, strategy in EXTRACTION_STRATEGIES:
        found = strategy(data)
        if found is None:
            continue
        if not isinstance(found, str):
            raise ModelOutputError("Model did not return JSON", raw=json.dumps(found))
        return name, found
    return "serialised_body", json.dumps(data)


def _load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        pass

    match = JSON_BLOCK_RE.search(text)
    if not match:
        raise ModelOutputError("Model did not return JSON", raw=text)
    try:
        return json.loads(match.group(0))
    except ValueError:
        raise ModelOutputError("Failed to parse model output as JSON", raw=text)


def _field(parsed: dict, key: str) -> str:
    value = parsed.get(key)
    if not value:
        return ""
    return _as_text(value)


def parse_bundle(text: str) -> CodeBundle:
    """Parse model text into a CodeBundle, defaulting missing fields to ''."""
    parsed = _load_json(text)
    if parsed is None:
        raise ModelOutputError("Model did not return JSON", raw=text)
    # Arrays, numbers and strings carry none of the keys.
    if not isinstance(parsed, dict):
        return CodeBundle()
    return CodeBundle(**{key: _field(parsed, key) for key in BUNDLE_KEYS})
