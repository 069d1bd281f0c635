"""Best-effort repair of near-JSON model output into a StructuredAnswer."""

import json
import re
from typing import Any

from pydantic import ValidationError

from .config import config
from .errors import MalformedOutputError
from .models import StructuredAnswer

logger = config.get_logger(__name__)

# Applied in this order, each over the whole string. Comma runs are matched
# whole so a second pass never changes the result.
REPAIR_STEPS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\.\.\."), ""),  # ellipses
    (re.compile(r"(?:,\s*)+([}\]])"), r"\1"),  # trailing commas
    (re.compile(r",(?:\s*,)+"), ","),  # doubled commas
    (re.compile(r"\[(?:\s*,)+"), "["),  # comma after opening bracket
    (re.compile(r",\s*\]"), "]"),  # comma before closing bracket
)

_CODE_FENCE = re.compile(r"```[a-zA-Z]*[ \t]*\n?(.*?)```", re.DOTALL)


def clean_json_string(json_string: str) -> str:
    """Strip the malformations chat models commonly leave in JSON.

    Returns:
        The cleaned string; not guaranteed to be valid JSON.
    """
    for pattern, replacement in REPAIR_STEPS:
        json_string = pattern.sub(replacement, json_string)
    return json_string


def strip_code_fence(text: str) -> str:
    """Return the body of the first fenced block, or the whole text if none."""
    match = _CODE_FENCE.search(text)
    return (match.group(1) if match else text).strip()


def _reject_constant(name: str) -> Any:
    msg = f"Invalid JSON constant: {name}"
    raise ValueError(msg)


def _loads(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def _log_failure(error: Exception, raw: str, cleaned: str) -> None:
    logger.error("JSON parsing error: %s", error)
    logger.error("Model raw output: %s", raw)
    logger.error("Cleaned output: %s", cleaned)


def repair(raw: str) -> StructuredAnswer:
    """Parse model output into a StructuredAnswer.

    A fenced block anywhere in the reply is used in place of the reply.
    Output that is already valid JSON is parsed untouched, so string values
    containing ``...`` or ``,]`` survive. Anything else goes through
    :func:`clean_json_string` once before strict parsing.

    Returns:
        The structured answer with all three fields present.

    Raises:
        MalformedOutputError: If the cleaned text is not valid JSON or does
            not describe a structured answer.
    """
    text = strip_code_fence(raw)
    try:
        data = _loads(text)
        cleaned = text
    except ValueError:
        cleaned = clean_json_string(text)
        try:
            data = _loads(cleaned)
        except ValueError as exc:
            _log_failure(exc, raw, cleaned)
            msg = f"Failed to parse JSON: {str(exc) or 'Unknown error occurred'}"
            raise MalformedOutputError(
                msg, raw_output=raw, cleaned_output=cleaned
            ) from exc

    try:
        return StructuredAnswer.model_validate(data)
    except ValidationError as exc:
        _log_failure(exc, raw, cleaned)
        msg = f"Failed to parse JSON: {exc}"
        raise MalformedOutputError(
            msg, raw_output=raw, cleaned_output=cleaned
        ) from exc
