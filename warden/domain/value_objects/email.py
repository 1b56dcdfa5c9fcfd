"""A Value Object representing an email address in the domain.

Equality is based on the normalized (lower-cased, stripped) value, which is
what makes email uniqueness case-insensitive across the subsystem.

Syntax checks are delegated to ``email_validator``, the same validator behind
pydantic's ``EmailStr``, so every address a request model accepts is also a
valid ``Email``.
"""

from dataclasses import dataclass
from typing import ClassVar

from email_validator import EmailNotValidError, validate_email


@dataclass(frozen=True, slots=True)
class Email:
    """An immutable, self-validating email address.

    Rules enforced on instantiation:
    - Conforms to RFC 5322 / RFC 6531 syntax (internationalized addresses allowed).
    - Has a reasonable length.
    - Is normalized to lowercase; IDNA domains are stored in Unicode form.

    Attributes:
        value: The string representation of the email address.
    """

    value: str

    MAX_LENGTH: ClassVar[int] = 254
    MIN_LENGTH: ClassVar[int] = 5

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise TypeError("Email value must be a string.")

        stripped = self.value.strip()
        if not (self.MIN_LENGTH <= len(stripped) <= self.MAX_LENGTH):
            raise ValueError(
                f"Email length must be between {self.MIN_LENGTH} and {self.MAX_LENGTH} characters."
            )
        try:
            validated = validate_email(stripped, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {e}") from e

        object.__setattr__(self, "value", validated.normalized.lower())

    @property
    def domain(self) -> str:
        return self.value.split("@")[1]

    def mask_for_logging(self) -> str:
        """Returns a masked version of the email for safe logging.

        Example: 'us**@e*****.com'
        """
        local, domain_part = self.value.split("@")
        masked_local = f"{local[:2]}{'*' * (len(local) - 2)}"
        masked_domain = f"{domain_part[:1]}{'*' * (len(domain_part) - 2)}{domain_part[-1:]}"
        return f"{masked_local}@{masked_domain}"

    def __str__(self) -> str:
        return self.value


def mask_email(raw: str) -> str:
    """Mask an email for logging without raising on malformed input."""
    try:
        return Email(raw).mask_for_logging()
    except (TypeError, ValueError):
        return "***"


def mask_token(token: str | None) -> str:
    """Return the first 8 characters of a token followed by an ellipsis."""
    if not token:
        return "<none>"
    return f"{token[:8]}..."
