"""
Reading structured translations out of model text.
"""

import json
import re
from typing import Any, Optional

from .errors import ParseFailure
from .schema import TranslationResult

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def _strip_code_fences(text: str) -> str:
    """Remove surrounding ```...``` fences (with or without 'json') if present."""
    t = text.strip()
    if t.startswith("```") and t.endswith("```"):
        t = re.sub(r"^```[A-Za-z0-9_-]*\s*", "", t, flags=re.DOTALL)
        t = re.sub(r"\s*```$", "", t, flags=re.DOTALL)
    return t.strip()


def extract_object(text: str) -> dict:
    """Parse the first JSON object in text; fences and surrounding prose are tolerated."""
    if not text or not text.strip():
        raise ParseFailure("Empty model output", raw_text=text or "")
    t = _strip_code_fences(text)

    try:
        data = json.loads(t)
    except json.JSONDecodeError:
        match = _JSON_OBJECT.search(t)
        if not match:
            raise ParseFailure("No JSON object in model output", raw_text=text)
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise ParseFailure(f"Malformed JSON in model output: {e}", raw_text=text) from e

    if not isinstance(data, dict):
        raise ParseFailure("Expected a JSON object.", raw_text=text)
    return data


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_translation(text: str) -> TranslationResult:
    """Strict parse: raises ParseFailure unless both required string fields are present."""
    data = extract_object(text)

    source_language = data.get("source_language")
    translation = data.get("translation")
    if not isinstance(source_language, str) or not source_language.strip():
        raise ParseFailure("Missing required field 'source_language'", raw_text=text)
    if not isinstance(translation, str):
        raise ParseFailure("Missing required field 'translation'", raw_text=text)

    return TranslationResult(
        source_language=source_language.strip(),
        translation=translation,
        romanization=_optional_str(data.get("romanization")),
        notes=_optional_str(data.get("notes"))
    )


def degraded_result(raw_text: str) -> TranslationResult:
    """Fallback shape when model text is not a structured translation."""
    return TranslationResult(source_language="unknown", translation=raw_text, degraded=True)
