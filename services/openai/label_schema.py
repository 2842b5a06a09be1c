"""Schema definitions for the scene label detection tool."""

from typing import Any, Dict

FUNCTION_NAME = "report_image_labels"

FUNCTION_DEFINITION: Dict[str, Any] = {
    "type": "function",
    "name": FUNCTION_NAME,
    "description": "Return the objects and scene labels visible in the camera frame.",
    "parameters": {
        "type": "object",
        "properties": {
            "labels": {
                "type": "array",
                "description": "Detected labels ordered from most to least confident.",
                "items": {
                    "type": "object",
                    "properties": {
                        "description": {
                            "type": "string",
                            "description": "Short noun for the object or scene, e.g. 'Person' or 'Car'.",
                        },
                        "score": {
                            "type": "number",
                            "description": "Confidence between 0 and 1.",
                        },
                    },
                    "required": ["description", "score"],
                    "additionalProperties": False,
                },
            },
        },
        "required": ["labels"],
        "additionalProperties": False,
    },
    "strict": True,
}
