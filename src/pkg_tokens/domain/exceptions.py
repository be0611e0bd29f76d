class TokenError(Exception):
    """Base class for token failures."""
    reason = "token_error"


class InvalidTokenError(TokenError):
    """Raised when a wire token cannot be honored. Callers only ever see this."""
    reason = "invalid"


class UnknownKindError(InvalidTokenError):
    """Raised when the wire prefix matches no token kind."""
    reason = "unknown_kind"


class MalformedTokenError(InvalidTokenError):
    """Raised when the payload is not valid base64url or has the wrong length."""
    reason = "malformed"


class InvalidSignatureError(InvalidTokenError):
    """Raised when the integrity check fails."""
    reason = "invalid_signature"


class TokenExpiredError(InvalidTokenError):
    """Raised when the kind TTL or the embedded expiry has passed."""
    reason = "expired"


class TokenNotFoundError(TokenError):
    """Raised when the store has no record for an otherwise valid token."""
    reason = "not_found"


class StoreError(TokenError):
    """Raised when the backing store fails or is unavailable."""
    reason = "store_error"
