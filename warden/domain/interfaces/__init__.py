"""Domain interfaces for dependency inversion.

The account security service depends on these abstractions only; the
infrastructure layer supplies the adapters.
"""

from .repositories import IAccountRepository
from .services import INotifier, IPasswordHasher, ISecureTokenGenerator, ITokenIssuer

__all__ = [
    "IAccountRepository",
    "INotifier",
    "IPasswordHasher",
    "ISecureTokenGenerator",
    "ITokenIssuer",
]
