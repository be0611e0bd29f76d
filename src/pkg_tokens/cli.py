# src/pkg_tokens/cli.py

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Sequence

from .config.env import settings_from_env
from .domain.constants import TokenKind
from .domain.exceptions import InvalidTokenError
from .integrations.common.service_factory import create_token_service
from .logging_config import configure_logging
from .utils.time import ms_to_datetime


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pkg_tokens",
        description="Inspect and issue opaque bearer tokens",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    inspect = sub.add_parser(
        "inspect",
        help="Decode a wire token, verify its signature and check expiration.",
    )
    inspect.add_argument("token", help="Wire token string")

    issue = sub.add_parser(
        "issue",
        help="Issue a token into the Redis store (needs PKG_TOKENS_REDIS_URL).",
    )
    issue.add_argument(
        "--kind",
        "-k",
        default=TokenKind.ACCESS.label,
        choices=[kind.label for kind in TokenKind],
        help="Token kind (default: access).",
    )
    issue.add_argument("--label", "-l", help="Record type label (default: access).")
    issue.add_argument(
        "--state",
        "-s",
        help="JSON object stored with the token.",
    )

    return parser.parse_args(args=argv)


def _inspect(token: str) -> dict[str, Any]:
    service = create_token_service(settings_from_env())
    try:
        decoded = service.inspect(token)
    except InvalidTokenError as exc:
        return {"ok": False, "valid": False, "reason": exc.reason, "error": str(exc)}

    return {
        "ok": True,
        "valid": True,
        "kind": decoded.kind.label,
        "token_id": str(decoded.token_id),
        "created": ms_to_datetime(decoded.created).isoformat(),
        "expires_at": (
            ms_to_datetime(decoded.expires_at).isoformat()
            if decoded.expires_at is not None
            else None
        ),
        "version": int(decoded.version),
    }


def _issue(kind: str, label: str | None, state_raw: str | None) -> dict[str, Any]:
    settings = settings_from_env()
    if not settings.redis_url:
        raise RuntimeError("Missing token store settings: PKG_TOKENS_REDIS_URL")

    state = json.loads(state_raw) if state_raw else {}
    if not isinstance(state, dict):
        raise RuntimeError("--state must be a JSON object")

    service = create_token_service(settings)
    token = service.create(TokenKind.from_label(kind), label=label, state=state)
    return {"ok": True, "kind": kind, "token": token}


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(settings_from_env().log_level)

    try:
        if args.command == "inspect":
            summary = _inspect(args.token)
        else:
            summary = _issue(args.kind, args.label, args.state)
    except Exception as exc:  # noqa: BLE001
        json.dump({"ok": False, "error": str(exc)}, sys.stdout, indent=2)
        sys.stdout.write("\n")
        raise

    json.dump(summary, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0 if summary.get("ok") else 1


if __name__ == "__main__":
    sys.exit(main())
