"""Schema definitions for the object detection tool."""

from typing import Any, Dict

FUNCTION_NAME = "report_detected_objects"

FUNCTION_DEFINITION: Dict[str, Any] = {
    "type": "function",
    "name": FUNCTION_NAME,
    "description": "Return the distinct objects visible in the image.",
    "parameters": {
        "type": "object",
        "properties": {
            "objects": {
                "type": "array",
                "description": "Short lowercase singular nouns, one per distinct object type.",
                "items": {"type": "string"},
            },
        },
        "required": ["objects"],
        "additionalProperties": False,
    },
    "strict": True,
}
