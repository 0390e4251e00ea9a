"""
Response Sanitizer
Isolate the JSON payload from raw model text.

Cosmetic wrapping (code fences, emphasis, inline code, surrounding prose) is
removed. Malformed JSON is never repaired.
"""

import json
import logging
import re
from typing import Any, Dict

from .errors import MalformedModelOutput

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"```[A-Za-z]*\n?")
_FENCE_CLOSE = re.compile(r"```\n?")
_BOLD = re.compile(r"\*\*([^*]*)\*\*")
_ITALIC = re.compile(r"\*([^*]*)\*")
_INLINE_CODE = re.compile(r"`([^`]*)`")


def _strip_markup(text: str) -> str:
    text = _FENCE_OPEN.sub("", text)
    text = _FENCE_CLOSE.sub("", text)
    text = _BOLD.sub(r"\1", text)
    text = _ITALIC.sub(r"\1", text)
    text = _INLINE_CODE.sub(r"\1", text)
    return text.strip()


def sanitize_response(raw: str) -> str:
    """
    Produce a candidate JSON string from raw model output.

    Args:
        raw: Text returned by the model gateway

    Returns:
        JSON object text (guaranteed to parse)

    Raises:
        MalformedModelOutput: no {...} span, or the span does not parse
    """
    raw = raw or ""
    logger.debug(f"Raw model response (first 500 chars): {raw[:500]}")

    text = _strip_markup(raw)

    if not (text.startswith("{") and text.endswith("}")):
        start = text.find("{")
        end = text.rfind("}")
        if start == -1 or end < start:
            logger.warning(f"No JSON object found in response. Preview: {text[:300]}...")
            raise MalformedModelOutput("No JSON object found in model output", raw_preview=raw[:300])
        text = text[start:end + 1]

    try:
        json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"JSON parse error: {e}")
        raise MalformedModelOutput(f"Model output is not valid JSON: {e}", raw_preview=raw[:300], cause=e)

    return text


def parse_payload(raw: str) -> Dict[str, Any]:
    """Sanitize and parse; the top level must be a JSON object."""
    payload = json.loads(sanitize_response(raw))
    if not isinstance(payload, dict):
        raise MalformedModelOutput("Model output JSON is not an object", raw_preview=(raw or "")[:300])
    return payload
