"""Prompt builders for object detection."""

def build_system_prompt() -> str:
    """Return the system prompt for the detector."""
    return (
        "You are an object detection assistant. "
        "List only objects that are clearly visible in the image. "
        "Do not guess at objects that are occluded or ambiguous."
    )


def build_user_prompt() -> str:
    """Return the user prompt sent alongside the image."""
    return (
        "Identify the distinct objects in the following image. "
        "Use short lowercase singular nouns such as 'cat', 'dog' or 'car', "
        "one entry per object type. Return an empty list if nothing is recognizable."
    )
