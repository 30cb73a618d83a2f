"""Identifier and random name generation."""

import random
import string
import uuid

_NAME_PREFIX = "task-"
_LETTERS = string.ascii_lowercase


def new_uuid() -> str:
    """Return a new random UUID in its canonical string form."""
    return str(uuid.uuid4())


def new_rand_name(prefix: str, length: int) -> str:
    """Return ``prefix`` followed by ``length`` random lowercase letters.

    An empty prefix falls back to ``"task-"``.
    """
    if length < 0:
        raise ValueError("length must not be negative")
    suffix = "".join(random.choice(_LETTERS) for _ in range(length))
    return (prefix or _NAME_PREFIX) + suffix