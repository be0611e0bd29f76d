from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ..domain.codec import TokenCodec
from ..domain.constants import TokenKind
from ..domain.entities import DecodedToken, TokenRecord
from ..domain.exceptions import InvalidTokenError, TokenNotFoundError
from ..domain.policy import ExpirationPolicy
from ..domain.ports import Clock, TokenStore
from ..domain.value_objects import PrincipalRef
from ..utils.time import utc_now_ms
from .use_cases.issue import IssueTokenUseCase
from .use_cases.lookup import LookupTokenUseCase, TouchTokenUseCase
from .use_cases.refresh import RefreshTokenUseCase
from .use_cases.resolve import ResolveTokenUseCase


@dataclass(slots=True)
class TokenService:
    """
    Framework-agnostic token facade.

    Composes the codec, the expiration policy and a TokenStore into the
    create / lookup / touch / refresh operations. Integrations (FastAPI,
    Strawberry, the CLI) adapt this to their own conventions.

    Every way a token can be unusable (unknown kind, malformed, bad
    signature, expired, no record) collapses to None / False here; the
    specific reason is only logged. StoreError always propagates, so a
    caller can tell "token not valid" from "store unavailable".
    """

    codec: TokenCodec
    policy: ExpirationPolicy
    store: TokenStore
    clock: Clock = utc_now_ms

    _issue: IssueTokenUseCase = field(init=False, repr=False)
    _resolve: ResolveTokenUseCase = field(init=False, repr=False)
    _lookup: LookupTokenUseCase = field(init=False, repr=False)
    _touch: TouchTokenUseCase = field(init=False, repr=False)
    _refresh: RefreshTokenUseCase = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._issue = IssueTokenUseCase(self.codec, self.policy, self.store, self.clock)
        self._resolve = ResolveTokenUseCase(self.codec, self.policy, self.clock)
        self._lookup = LookupTokenUseCase(self._resolve, self.store, self.policy, self.clock)
        self._touch = TouchTokenUseCase(self._resolve, self.store, self.policy, self.clock)
        self._refresh = RefreshTokenUseCase(
            self.codec, self._resolve, self.store, self.policy, self.clock
        )

    # --- Core operations --------------------------------------------------

    def create(
            self,
            kind: TokenKind,
            label: Optional[str] = None,
            principal: Optional[PrincipalRef] = None,
            state: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Issue a token; raises StoreError if the record cannot be written."""
        return self._issue.execute(kind, label, principal, state)

    def create_for_principal(
            self,
            principal: PrincipalRef,
            state: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Issue an ACCESS token bound to `principal`."""
        return self._issue.execute(TokenKind.ACCESS, None, principal, state)

    def lookup(self, wire: str) -> Optional[TokenRecord]:
        """Wire string -> TokenRecord, or None if the token is not valid."""
        try:
            return self._lookup.execute(wire)
        except (InvalidTokenError, TokenNotFoundError):
            return None

    def touch(self, wire: str) -> bool:
        """Bump `accessed`; False if the token is not valid."""
        try:
            self._touch.execute(wire)
        except InvalidTokenError:
            return False
        return True

    def refresh(self, wire: str) -> Optional[str]:
        """Return a new ACCESS wire string for the same id, or None."""
        try:
            return self._refresh.execute(wire)
        except (InvalidTokenError, TokenNotFoundError):
            return None

    # --- Diagnostics ------------------------------------------------------

    def inspect(self, wire: str) -> DecodedToken:
        """
        Decode and validate without touching the store.

        Raises the specific InvalidTokenError subclass. Meant for operators
        and the CLI; never expose its distinctions to token holders.
        """
        return self._resolve.execute(wire)
