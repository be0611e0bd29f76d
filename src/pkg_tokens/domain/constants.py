import base64
from enum import Enum, IntEnum

# Short-lived token is good for 24 hours
SHORT_TOKEN_AGE_MS = 24 * 60 * 60 * 1000

# Long-lived token is good for 7 days
LONG_TOKEN_AGE_MS = 7 * 24 * 60 * 60 * 1000

# Signed in place of an expiry for kinds that do not embed one
MAX_EXPIRY_SENTINEL = 2 ** 63 - 1

DEFAULT_TOKEN_LABEL = "access"
DEFAULT_SECRET_SALT = "super secret token value"

ID_LENGTH = 16
EXPIRY_LENGTH = 8
SIGNATURE_LENGTH = 20


class TokenKind(Enum):
    """
    Closed set of token categories.

    Each member is (short prefix, carries embedded expiry, default TTL in ms).
    The short prefix is part of the signed message; the wire prefix (its
    base64url form) starts every wire string.
    """

    ACCESS = ("acc", True, SHORT_TOKEN_AGE_MS)
    REFRESH = ("ref", True, LONG_TOKEN_AGE_MS)
    OFFLINE = ("off", False, LONG_TOKEN_AGE_MS)
    EMAIL = ("ema", False, LONG_TOKEN_AGE_MS)

    def __init__(self, prefix: str, carries_embedded_expiry: bool, default_ttl_ms: int) -> None:
        self.prefix = prefix
        self.carries_embedded_expiry = carries_embedded_expiry
        self.default_ttl_ms = default_ttl_ms
        self.wire_prefix = base64.urlsafe_b64encode(prefix.encode("ascii")).decode("ascii")

    @property
    def label(self) -> str:
        return self.name.lower()

    @property
    def legacy_payload_length(self) -> int:
        length = ID_LENGTH + SIGNATURE_LENGTH
        if self.carries_embedded_expiry:
            length += EXPIRY_LENGTH
        return length

    @classmethod
    def from_label(cls, label: str) -> "TokenKind":
        try:
            return cls[label.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown token kind: {label!r}") from None

    @classmethod
    def from_wire(cls, wire: str) -> "TokenKind | None":
        for kind in cls:
            if wire.startswith(kind.wire_prefix):
                return kind
        return None


class PrincipalKind(Enum):
    ORGANIZATION = "organization"
    ADMIN_USER = "admin_user"
    APPLICATION = "application"
    APPLICATION_USER = "application_user"


class SignatureVersion(IntEnum):
    LEGACY_SHA1 = 1
    HMAC_SHA256 = 2
