"""Generator for single-use verification and reset tokens."""

import secrets

from warden.domain.interfaces.services import ISecureTokenGenerator

TOKEN_BYTES = 32


class SecureTokenGenerator(ISecureTokenGenerator):
    """Returns 32 random bytes from the OS CSPRNG, hex encoded (64 characters)."""

    def __init__(self, nbytes: int = TOKEN_BYTES):
        self._nbytes = nbytes

    def generate(self) -> str:
        return secrets.token_hex(self._nbytes)
