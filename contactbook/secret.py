"""Generate a random signing secret suitable for ``JWT_SECRET``."""

from __future__ import annotations

import secrets


def generate_secret_key(num_bytes: int = 32) -> str:
    """Return ``num_bytes`` of cryptographically secure randomness, hex encoded."""
    return secrets.token_hex(num_bytes)


if __name__ == "__main__":
    print(generate_secret_key())
