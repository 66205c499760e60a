"""
Prompt used for image descriptions.
"""

DEFAULT_PROMPT = (
    "Describe this image in detail, including any text, objects, people, "
    "and activities visible."
)
