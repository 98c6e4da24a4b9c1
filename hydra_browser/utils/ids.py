"""
Identifier generation for panes, workspaces and downloads.
"""

import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase


def generate_id() -> str:
    """Returns an id of the form '<epoch-ms>-<7 base36 chars>'."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(7))
    return f"{int(time.time() * 1000)}-{suffix}"
