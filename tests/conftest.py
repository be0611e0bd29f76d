import pytest

from pkg_tokens.adapters.memory.store import InMemoryTokenStore
from pkg_tokens.application.service import TokenService
from pkg_tokens.domain.codec import TokenCodec
from pkg_tokens.domain.policy import ExpirationPolicy

T0 = 1_700_000_000_000
HOUR_MS = 60 * 60 * 1000
SECRET = "test-secret"


class FixedClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now_ms: int = T0) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def codec():
    return TokenCodec(SECRET)


@pytest.fixture
def policy():
    return ExpirationPolicy.default()


@pytest.fixture
def store(clock):
    return InMemoryTokenStore(clock=clock)


@pytest.fixture
def service(codec, policy, store, clock):
    return TokenService(codec=codec, policy=policy, store=store, clock=clock)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "PKG_TOKENS_SECRET",
        "PKG_TOKENS_ACCESS_EXPIRES",
        "PKG_TOKENS_REFRESH_EXPIRES",
        "PKG_TOKENS_EMAIL_EXPIRES",
        "PKG_TOKENS_OFFLINE_EXPIRES",
        "PKG_TOKENS_PERSISTENCE_EXPIRES",
        "PKG_TOKENS_SIGNATURE_VERSION",
        "PKG_TOKENS_ACCEPT_LEGACY",
        "PKG_TOKENS_REDIS_URL",
        "PKG_TOKENS_REDIS_NAMESPACE",
    ):
        monkeypatch.delenv(name, raising=False)
