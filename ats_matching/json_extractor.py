"""
JSON Extraction Module

Recovers the JSON object an LLM wrapped in prose or markdown fences.
"""

import json
import logging
from typing import Any, Dict

from .errors import ExtractionError, JsonParseError

logger = logging.getLogger(__name__)


def extract_json_block(text: str) -> str:
    """
    Return the substring from the first '{' to the last '}' inclusive.

    The result is not validated as JSON. If the response holds several
    independent objects the span covers all of them and the subsequent strict
    parse fails.

    Raises:
        ExtractionError: empty or non-string input, or no usable brace span
    """
    if not text or not isinstance(text, str):
        raise ExtractionError("AI returned an empty or invalid response.", raw_text=text if isinstance(text, str) else None)

    first_brace = text.find("{")
    last_brace = text.rfind("}")
    if first_brace == -1 or last_brace == -1 or last_brace < first_brace:
        raise ExtractionError(
            f'Could not find a valid JSON object in the AI response. The AI said: "{text}"',
            raw_text=text,
        )

    return text[first_brace:last_brace + 1]


def parse_json_object(text: str) -> Dict[str, Any]:
    """
    Extract the JSON block from an oracle response and strictly parse it.

    Raises:
        ExtractionError: no brace span found
        JsonParseError: the span is not valid JSON, or not a JSON object
    """
    block = extract_json_block(text)
    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        logger.debug(f"Invalid JSON block: {block[:500]}")
        raise JsonParseError(f"The AI response is not valid JSON: {e}", raw_text=text) from e

    if not isinstance(data, dict):
        raise JsonParseError(
            f"Expected a JSON object, got {type(data).__name__}", raw_text=text
        )
    return data
