from __future__ import annotations

import secrets

TOKEN_BYTES = 16


def generate_token() -> str:
    """128 random bits from the OS CSPRNG, rendered as 32 hex characters."""
    return secrets.token_hex(TOKEN_BYTES)


# ---------------------------------------------------------------------------
# Admin gate
#
# The admin secret is compared as a plain string. This is NOT constant-time,
# so response timing can leak how much of a guess matched. Acceptable for a
# single small event run by one organizer; swap in secrets.compare_digest if
# that assumption changes.
# ---------------------------------------------------------------------------


class AdminGate:
    def __init__(self, secret: str):
        self._secret = secret

    def authorize(self, supplied: str | None) -> bool:
        if not supplied:
            return False
        return supplied == self._secret
