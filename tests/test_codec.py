import base64
import hashlib
import struct

import pytest

from pkg_tokens.domain.codec import TokenCodec
from pkg_tokens.domain.constants import MAX_EXPIRY_SENTINEL, SignatureVersion, TokenKind
from pkg_tokens.domain.exceptions import (
    InvalidSignatureError,
    InvalidTokenError,
    MalformedTokenError,
    UnknownKindError,
)
from pkg_tokens.domain.value_objects import TokenId

from conftest import HOUR_MS, SECRET, T0


def _payload(kind, wire):
    body = wire[len(kind.wire_prefix):]
    return base64.urlsafe_b64decode(body + "=" * (-len(body) % 4))


def _wire(kind, payload):
    return kind.wire_prefix + base64.urlsafe_b64encode(payload).rstrip(b"=").decode("ascii")


# --- round trip ---


@pytest.mark.parametrize("kind", list(TokenKind))
@pytest.mark.parametrize("version", list(SignatureVersion))
def test_round_trip(kind, version):
    codec = TokenCodec(SECRET, signature_version=version)
    token_id = TokenId.generate(T0)

    wire = codec.encode(kind, token_id, 24 * HOUR_MS)
    decoded = codec.decode(wire)

    assert wire.startswith(kind.wire_prefix)
    assert "=" not in wire
    assert decoded.kind is kind
    assert decoded.token_id == token_id
    assert decoded.version is version
    if kind.carries_embedded_expiry:
        assert decoded.expires_at == T0 + 24 * HOUR_MS
    else:
        assert decoded.expires_at is None


def test_legacy_payload_layout_is_bit_exact():
    codec = TokenCodec(SECRET)
    token_id = TokenId.generate(T0)
    expires = T0 + 24 * HOUR_MS

    wire = codec.encode(TokenKind.ACCESS, token_id, 24 * HOUR_MS)
    payload = _payload(TokenKind.ACCESS, wire)

    message = f"acc{token_id.canonical}{SECRET}{expires}".encode("utf-8")
    assert len(payload) == 44
    assert payload[:16] == token_id.bytes
    assert struct.unpack(">q", payload[16:24])[0] == expires
    assert payload[24:] == hashlib.sha1(message).digest()


def test_legacy_payload_without_expiry_signs_sentinel():
    codec = TokenCodec(SECRET)
    token_id = TokenId.generate(T0)

    wire = codec.encode(TokenKind.EMAIL, token_id, 24 * HOUR_MS)
    payload = _payload(TokenKind.EMAIL, wire)

    message = f"ema{token_id.canonical}{SECRET}{MAX_EXPIRY_SENTINEL}".encode("utf-8")
    assert len(payload) == 36
    assert payload[16:] == hashlib.sha1(message).digest()


def test_hmac_payload_carries_version_byte():
    codec = TokenCodec(SECRET, signature_version=SignatureVersion.HMAC_SHA256)
    token_id = TokenId.generate(T0)

    access = _payload(TokenKind.ACCESS, codec.encode(TokenKind.ACCESS, token_id, HOUR_MS))
    offline = _payload(TokenKind.OFFLINE, codec.encode(TokenKind.OFFLINE, token_id, HOUR_MS))

    assert len(access) == 45
    assert len(offline) == 37
    assert access[0] == 2
    assert access[1:17] == token_id.bytes


def test_both_versions_decode_side_by_side():
    token_id = TokenId.generate(T0)
    legacy = TokenCodec(SECRET).encode(TokenKind.REFRESH, token_id, HOUR_MS)
    hardened = TokenCodec(SECRET, signature_version=SignatureVersion.HMAC_SHA256).encode(
        TokenKind.REFRESH, token_id, HOUR_MS
    )

    codec = TokenCodec(SECRET)
    assert codec.decode(legacy).version is SignatureVersion.LEGACY_SHA1
    assert codec.decode(hardened).version is SignatureVersion.HMAC_SHA256


def test_legacy_tokens_can_be_refused():
    token_id = TokenId.generate(T0)
    legacy = TokenCodec(SECRET).encode(TokenKind.ACCESS, token_id, HOUR_MS)
    strict = TokenCodec(
        SECRET, signature_version=SignatureVersion.HMAC_SHA256, accept_legacy=False
    )

    with pytest.raises(InvalidSignatureError):
        strict.decode(legacy)

    assert strict.decode(strict.encode(TokenKind.ACCESS, token_id, HOUR_MS)).token_id == token_id


# --- tamper sensitivity ---


@pytest.mark.parametrize("version", list(SignatureVersion))
def test_any_signature_bit_flip_is_rejected(version):
    codec = TokenCodec(SECRET, signature_version=version)
    kind = TokenKind.ACCESS
    payload = _payload(kind, codec.encode(kind, TokenId.generate(T0), HOUR_MS))

    for byte_index in range(len(payload) - 20, len(payload)):
        for bit in range(8):
            tampered = bytearray(payload)
            tampered[byte_index] ^= 1 << bit
            with pytest.raises(InvalidSignatureError):
                codec.decode(_wire(kind, bytes(tampered)))


def test_extended_expiry_is_rejected():
    codec = TokenCodec(SECRET)
    kind = TokenKind.ACCESS
    payload = bytearray(_payload(kind, codec.encode(kind, TokenId.generate(T0), HOUR_MS)))
    payload[16:24] = struct.pack(">q", T0 + 1000 * HOUR_MS)

    with pytest.raises(InvalidSignatureError):
        codec.decode(_wire(kind, bytes(payload)))


def test_wrong_secret_is_rejected():
    wire = TokenCodec(SECRET).encode(TokenKind.OFFLINE, TokenId.generate(T0), HOUR_MS)
    with pytest.raises(InvalidSignatureError):
        TokenCodec("other-secret").decode(wire)


# --- kind isolation ---


def test_token_never_decodes_under_another_kind():
    codec = TokenCodec(SECRET)
    token_id = TokenId.generate(T0)

    for source in TokenKind:
        wire = codec.encode(source, token_id, HOUR_MS)
        body = wire[len(source.wire_prefix):]
        for target in TokenKind:
            if target is source:
                continue
            with pytest.raises(InvalidTokenError):
                codec.decode(target.wire_prefix + body)


def test_same_length_kinds_fail_on_signature():
    codec = TokenCodec(SECRET)
    wire = codec.encode(TokenKind.ACCESS, TokenId.generate(T0), HOUR_MS)
    swapped = TokenKind.REFRESH.wire_prefix + wire[len(TokenKind.ACCESS.wire_prefix):]

    with pytest.raises(InvalidSignatureError):
        codec.decode(swapped)


# --- malformed input ---


@pytest.mark.parametrize("wire", ["", "YWN", "xyz123", "Bearer YWNj", None, 42])
def test_unknown_kind(codec, wire):
    with pytest.raises(UnknownKindError):
        codec.decode(wire)


@pytest.mark.parametrize(
    "body",
    [
        "",
        "AAAA",
        "!!!!",
        "AAAA+/==",
        "A",
        "é" * 8,
    ],
)
def test_malformed_payload(codec, body):
    with pytest.raises(MalformedTokenError):
        codec.decode(TokenKind.ACCESS.wire_prefix + body)


def test_truncated_token_is_malformed(codec):
    wire = codec.encode(TokenKind.ACCESS, TokenId.generate(T0), HOUR_MS)
    with pytest.raises(MalformedTokenError):
        codec.decode(wire[:-4])


def test_non_canonical_trailing_bits_are_malformed(codec):
    alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
    wire = codec.encode(TokenKind.ACCESS, TokenId.generate(T0), HOUR_MS)
    # A 44-byte payload leaves two unused bits in the last character.
    last = alphabet.index(wire[-1])
    respelled = wire[:-1] + alphabet[last ^ 0b01]

    assert _payload(TokenKind.ACCESS, respelled) == _payload(TokenKind.ACCESS, wire)
    with pytest.raises(MalformedTokenError):
        codec.decode(respelled)


def test_id_without_timestamp_is_malformed(codec):
    payload = bytearray(_payload(TokenKind.OFFLINE, codec.encode(TokenKind.OFFLINE, TokenId.generate(T0), HOUR_MS)))
    payload[6] = (payload[6] & 0x0F) | 0x40  # version 4

    with pytest.raises(MalformedTokenError):
        codec.decode(_wire(TokenKind.OFFLINE, bytes(payload)))


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenCodec("")
