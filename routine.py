import json
import logging
import re
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Routine Models
# ------------------------------------------------------------------
class Step(BaseModel):
    model_config = ConfigDict(extra="allow")

    step: Optional[int] = None  # display position, not checked against the index
    action: str
    duration: Union[str, int, float, None] = None
    notes: Union[str, int, float, None] = None


class Routine(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str
    description: str
    steps: List[Step] = Field(default_factory=list)

    def to_dict(self) -> dict:
        # exclude_unset keeps the keys exactly as they were given
        return self.model_dump(exclude_unset=True)

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def fallback_routine() -> dict:
    """Canned routine returned when the model output cannot be parsed."""
    return {
        "title": "Custom Routine",
        "description": "A personalized routine based on your request",
        "steps": [
            {
                "step": 1,
                "action": "Start with the basics outlined in your request",
                "duration": "Variable",
                "notes": "Generated content could not be parsed properly",
            }
        ],
    }


# ------------------------------------------------------------------
# JSON Extraction
# ------------------------------------------------------------------
FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")
BRACE_SPAN = re.compile(r"\{[\s\S]*\}")


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def extract_json(content: str) -> Any:
    """
    Pulls a JSON value out of free model text.

    A ```json fenced block wins over everything else. Without one, the span
    from the first "{" to the last "}" is used, and without that the whole
    text is parsed. Raises ValueError when the candidate is not valid JSON
    (NaN and Infinity included).
    """
    match = FENCED_JSON.search(content) or BRACE_SPAN.search(content)

    if match:
        # An empty fenced block falls back to the whole match
        candidate = match.group(1) if match.lastindex and match.group(1) else match.group(0)
    else:
        candidate = content

    return json.loads(candidate, parse_constant=_reject_constant)


def parse_routine_content(content: Any) -> Any:
    """Parsed model output, or the fallback routine if it does not parse."""
    try:
        return extract_json(content)
    except (ValueError, TypeError, RecursionError) as e:
        logger.error(f"JSON Parse Error: {e}")
        logger.error(f"Generated Content: {content}")
        return fallback_routine()
