"""Topic and sheet identifier generation."""

import secrets

ID_LENGTH = 26


def generate_id() -> str:
    """Return a 26-character hex token (104 random bits).

    Collisions are not re-checked; the entropy makes them negligible.
    """
    return secrets.token_hex(ID_LENGTH // 2)
