"""
Parsing of free-text commands and model replies.

Bin movements use a fixed pattern and never reach the model. Model
replies for stock commands must validate against the InterpretedCommand
union; anything else is rejected as a whole.
"""

import json
import re
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from intellectory.core.entities.bins import MovementType
from intellectory.core.entities.commands import BinMovementCommand, InterpretedCommand
from intellectory.core.exceptions import LLMResponseError

BIN_COMMAND_PATTERN = re.compile(
    r"(send|receive|return) (\d+) (.+?) (to|from) (.+)",
    re.IGNORECASE,
)

_VERB_TO_MOVEMENT = {
    "send": MovementType.SENT,
    "receive": MovementType.RECEIVED,
    "return": MovementType.RETURNED,
}

BIN_COMMAND_HELP = (
    "Sorry, I could only understand bin movements like 'send 10 chep plastic to Ziyard'."
)

UNKNOWN_COMMAND_MESSAGE = "Sorry, I couldn't understand that command. Please try rephrasing."

_command_adapter: TypeAdapter[InterpretedCommand] = TypeAdapter(InterpretedCommand)


def parse_bin_command(text: str) -> BinMovementCommand | None:
    """Recognise `(send|receive|return) <qty> <bin> (to|from) <party>`."""
    match = BIN_COMMAND_PATTERN.search(text.strip())
    if not match:
        return None
    verb, quantity, bin_name, _, party_name = match.groups()
    return BinMovementCommand(
        movement_type=_VERB_TO_MOVEMENT[verb.lower()],
        quantity=int(quantity),
        bin_name=bin_name.strip(),
        party_name=party_name.strip(),
    )


def extract_json_string(text: str) -> str | None:
    """Pull the JSON object out of a model reply (bare, fenced, or embedded)."""
    text = text.strip()

    if text.startswith("{"):
        return text

    match = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
    if match:
        return match.group(1).strip()

    match = re.search(r"\{[\s\S]*\}", text)
    if match:
        return match.group(0)

    return None


def parse_model_reply(text: str | None) -> InterpretedCommand:
    """
    Validate a model reply against the command contract.

    Raises:
        LLMResponseError: empty reply, no JSON object, bad JSON syntax,
            or a payload that fits none of ADD, UPDATE, QUERY, UNKNOWN.
    """
    if not text or not text.strip():
        raise LLMResponseError("Empty response", text)

    json_str = extract_json_string(text)
    if not json_str:
        raise LLMResponseError("No JSON object found in response", text)

    try:
        raw: Any = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise LLMResponseError(f"Invalid JSON syntax: {e}", text) from e

    if not isinstance(raw, dict):
        raise LLMResponseError("Response is not a JSON object", text)

    if isinstance(raw.get("action"), str):
        raw["action"] = raw["action"].strip().upper()

    try:
        return _command_adapter.validate_python(raw)
    except PydanticValidationError as e:
        problems = [
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise LLMResponseError("; ".join(problems), text) from e
