"""Short identifier rules: custom-name sanitization and random id generation."""

import random
import re
import secrets

from app.config import SHORT_ID_LENGTH

# nanoid's default URL-safe alphabet
SHORT_ID_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789_-"

_WHITESPACE_RUN = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_custom_name(name: str) -> str:
    """
    Turn a user-supplied link name into a short id.
    Trims, collapses whitespace runs into "-", then drops anything outside [A-Za-z0-9_-].
    May return "" when nothing usable is left.
    """
    name = _WHITESPACE_RUN.sub("-", name.strip())
    return _DISALLOWED.sub("", name)


def generate_short_id(length: int = SHORT_ID_LENGTH, rng: random.Random | None = None) -> str:
    """Random URL-safe id. Pass rng for reproducible draws; default is the secrets module."""
    choice = rng.choice if rng is not None else secrets.choice
    return "".join(choice(SHORT_ID_ALPHABET) for _ in range(length))
