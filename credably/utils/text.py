import re


def mentions(text: str, name: str) -> bool:
    """Case-insensitive whole-word match, so "MIT" does not hit "Smith College"."""
    pattern = rf"(?<![a-z0-9]){re.escape(name.lower())}(?![a-z0-9])"
    return re.search(pattern, (text or "").lower()) is not None
