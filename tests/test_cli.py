import json

import pytest

from pkg_tokens.cli import main
from pkg_tokens.domain.codec import TokenCodec
from pkg_tokens.domain.constants import SHORT_TOKEN_AGE_MS, TokenKind
from pkg_tokens.domain.value_objects import TokenId
from pkg_tokens.utils.time import utc_now_ms

from conftest import SECRET


def _run(capsys, argv):
    code = main(argv)
    return code, json.loads(capsys.readouterr().out)


def test_inspect_valid_token(monkeypatch, capsys):
    monkeypatch.setenv("PKG_TOKENS_SECRET", SECRET)
    token_id = TokenId.generate(utc_now_ms())
    wire = TokenCodec(SECRET).encode(TokenKind.ACCESS, token_id, SHORT_TOKEN_AGE_MS)

    code, out = _run(capsys, ["inspect", wire])

    assert code == 0
    assert out["ok"] is True
    assert out["valid"] is True
    assert out["kind"] == "access"
    assert out["token_id"] == str(token_id)
    assert out["version"] == 1
    assert out["expires_at"] is not None


def test_inspect_reports_reason(monkeypatch, capsys):
    monkeypatch.setenv("PKG_TOKENS_SECRET", SECRET)
    wire = TokenCodec("other").encode(TokenKind.OFFLINE, TokenId.generate(utc_now_ms()), 1)

    code, out = _run(capsys, ["inspect", wire])

    assert code == 1
    assert out["valid"] is False
    assert out["reason"] == "invalid_signature"


def test_inspect_expired_token(monkeypatch, capsys):
    monkeypatch.setenv("PKG_TOKENS_SECRET", SECRET)
    monkeypatch.setenv("PKG_TOKENS_EMAIL_EXPIRES", "1000")
    wire = TokenCodec(SECRET).encode(TokenKind.EMAIL, TokenId.generate(utc_now_ms() - 60_000), 1000)

    code, out = _run(capsys, ["inspect", wire])

    assert code == 1
    assert out["reason"] == "expired"


def test_issue_requires_redis(capsys):
    with pytest.raises(RuntimeError, match="PKG_TOKENS_REDIS_URL"):
        main(["issue", "--kind", "refresh"])

    out = json.loads(capsys.readouterr().out)
    assert out["ok"] is False
