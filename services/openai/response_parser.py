"""Helpers to parse Responses API outputs."""

import json
from typing import Any, Dict, List, Optional


def parse_function_call(response: Any, *, tool_name: str) -> Dict[str, Any]:
    """Extract the function call arguments for the specified tool name."""
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) == "function_call" and getattr(item, "name", None) == tool_name:
            return json.loads(getattr(item, "arguments", "{}") or "{}")
    raise RuntimeError(f"No function_call output for '{tool_name}' found in Responses API output.")


def normalize_labels(raw: Any) -> List[str]:
    """Lowercase, strip and deduplicate labels, keeping first-seen order."""
    if not isinstance(raw, list):
        return []
    labels = [str(item).strip().lower() for item in raw if str(item).strip()]
    return list(dict.fromkeys(labels))


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
    """Return token usage information from the response, if present."""
    usage = getattr(response, "usage", None)
    return {
        "input_tokens": getattr(usage, "input_tokens", None) if usage else None,
        "output_tokens": getattr(usage, "output_tokens", None) if usage else None,
    }
