from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import re
import struct

from .constants import (
    EXPIRY_LENGTH,
    ID_LENGTH,
    MAX_EXPIRY_SENTINEL,
    SIGNATURE_LENGTH,
    SignatureVersion,
    TokenKind,
)
from .entities import DecodedToken
from .exceptions import InvalidSignatureError, MalformedTokenError, UnknownKindError
from .value_objects import TokenId

_BASE64URL = re.compile(r"[A-Za-z0-9_-]*")
_EXPIRY = struct.Struct(">q")


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    if not _BASE64URL.fullmatch(text):
        raise MalformedTokenError("Token payload is not base64url")
    try:
        raw = base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
    except binascii.Error as exc:
        raise MalformedTokenError("Token payload is not base64url") from exc
    # Unused trailing bits must be zero so every token has one spelling.
    if _b64encode(raw) != text:
        raise MalformedTokenError("Token payload is not canonical base64url")
    return raw


class TokenCodec:
    """
    Encode, decode and verify wire token strings.

    Wire string: `kind.wire_prefix + base64url(payload)`, unpadded.

    Legacy payload (version 1), bit-compatible with tokens already issued:
        id (16) | expiry (8, only for kinds that embed one) | SHA1 (20)

    Hardened payload (version 2), tagged by a leading version byte:
        0x02 | id (16) | expiry (8, optional) | HMAC-SHA256 truncated (20)

    Payload lengths differ by that one byte, so both versions decode side by
    side while secrets migrate. `signature_version` picks what `encode` emits;
    `accept_legacy=False` rejects version 1 tokens once migration is over.

    The codec holds no mutable state and can be shared across threads.
    """

    def __init__(
        self,
        secret: str,
        *,
        signature_version: SignatureVersion = SignatureVersion.LEGACY_SHA1,
        accept_legacy: bool = True,
    ) -> None:
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._secret_bytes = secret.encode("utf-8")
        self._signature_version = SignatureVersion(signature_version)
        self._accept_legacy = accept_legacy

    @property
    def signature_version(self) -> SignatureVersion:
        return self._signature_version

    # ------------------------------------------------------------------ #
    # Encode
    # ------------------------------------------------------------------ #

    def encode(self, kind: TokenKind, token_id: TokenId, ttl_ms: int) -> str:
        """
        Build the wire string for `token_id`.

        For kinds with embedded expiry the payload carries
        `token_id.timestamp_ms + ttl_ms`.
        """
        expires = MAX_EXPIRY_SENTINEL
        body = token_id.bytes
        if kind.carries_embedded_expiry:
            expires = token_id.timestamp_ms + ttl_ms
            body += _EXPIRY.pack(expires)

        version = self._signature_version
        signature = self._sign(version, kind, token_id, expires)
        if version is SignatureVersion.LEGACY_SHA1:
            payload = body + signature
        else:
            payload = bytes([version]) + body + signature

        return kind.wire_prefix + _b64encode(payload)

    # ------------------------------------------------------------------ #
    # Decode
    # ------------------------------------------------------------------ #

    def decode(self, wire: str) -> DecodedToken:
        """
        Decode a wire string and verify its signature.

        Does not check expiration; see ExpirationPolicy.

        Raises:
            UnknownKindError
            MalformedTokenError
            InvalidSignatureError
        """
        if not isinstance(wire, str):
            raise UnknownKindError("Token is not a string")

        kind = TokenKind.from_wire(wire)
        if kind is None:
            raise UnknownKindError("Unrecognized token prefix")

        payload = _b64decode(wire[len(kind.wire_prefix):])
        version, body = self._split_version(kind, payload)

        try:
            token_id = TokenId.from_bytes(body[:ID_LENGTH])
        except ValueError as exc:
            raise MalformedTokenError(str(exc)) from exc

        offset = ID_LENGTH
        expires_at = None
        expires = MAX_EXPIRY_SENTINEL
        if kind.carries_embedded_expiry:
            (expires,) = _EXPIRY.unpack_from(body, offset)
            expires_at = expires
            offset += EXPIRY_LENGTH

        expected = self._sign(version, kind, token_id, expires)
        if not hmac.compare_digest(body[offset:], expected):
            raise InvalidSignatureError("Token signature mismatch")

        return DecodedToken(kind=kind, token_id=token_id, expires_at=expires_at, version=version)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _split_version(self, kind: TokenKind, payload: bytes) -> tuple[SignatureVersion, bytes]:
        legacy_length = kind.legacy_payload_length
        if len(payload) == legacy_length:
            if not self._accept_legacy:
                raise InvalidSignatureError("Legacy token signatures are no longer accepted")
            return SignatureVersion.LEGACY_SHA1, payload

        if len(payload) == legacy_length + 1 and payload[0] == SignatureVersion.HMAC_SHA256:
            return SignatureVersion.HMAC_SHA256, payload[1:]

        raise MalformedTokenError(
            f"Unexpected payload length {len(payload)} for {kind.label} token"
        )

    def _sign(
        self,
        version: SignatureVersion,
        kind: TokenKind,
        token_id: TokenId,
        expires: int,
    ) -> bytes:
        if version is SignatureVersion.LEGACY_SHA1:
            message = f"{kind.prefix}{token_id.canonical}{self._secret}{expires}"
            return hashlib.sha1(message.encode("utf-8")).digest()

        message = f"{kind.prefix}{token_id.canonical}{expires}"
        digest = hmac.new(self._secret_bytes, message.encode("utf-8"), hashlib.sha256).digest()
        return digest[:SIGNATURE_LENGTH]
