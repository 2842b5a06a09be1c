"""Prompt builders for camera frame labeling."""


def build_system_prompt() -> str:
    """Return the system prompt for the label classifier."""
    return (
        "You label frames from a fixed security camera. "
        "Report only what is clearly visible: people, animals, vehicles, and notable objects. "
        "Use short, generic nouns and conservative confidence scores."
    )


def build_user_prompt(max_labels: int) -> str:
    """Return the user prompt asking for at most ``max_labels`` labels."""
    return (
        f"List up to {max_labels} labels for this camera frame, most confident first. "
        "Always call the tool, returning an empty list when nothing is recognisable."
    )
