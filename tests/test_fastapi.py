from typing import Optional

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from pkg_tokens.application.service import TokenService
from pkg_tokens.domain.constants import TokenKind
from pkg_tokens.domain.entities import TokenRecord
from pkg_tokens.domain.exceptions import StoreError
from pkg_tokens.domain.value_objects import TokenId
from pkg_tokens.integrations.fastapi import FastAPITokenAuth

from conftest import HOUR_MS


class UnavailableStore:
    def put(self, token_id, record, ttl_seconds):
        raise StoreError("down")

    def get(self, token_id):
        raise StoreError("down")

    def set_accessed(self, token_id, accessed_ms, ttl_seconds):
        raise StoreError("down")


def _client(service: TokenService) -> TestClient:
    token_auth = FastAPITokenAuth(service=service)
    app = FastAPI()

    @app.get("/me")
    async def me(record: TokenRecord = Depends(token_auth.get_current_token)):
        return {"token_id": str(record.token_id), "state": record.state}

    @app.get("/maybe")
    async def maybe(record: Optional[TokenRecord] = Depends(token_auth.get_optional_token)):
        return {"anonymous": record is None}

    return TestClient(app)


@pytest.fixture
def client(service):
    return _client(service)


def test_bearer_token_resolves_record(client, service):
    wire = service.create(TokenKind.ACCESS, state={"role": "reader"})

    response = client.get("/me", headers={"Authorization": f"Bearer {wire}"})

    assert response.status_code == 200
    assert response.json()["state"] == {"role": "reader"}
    assert response.json()["token_id"] == str(service.inspect(wire).token_id)


def test_cookie_token_resolves_record(client, service):
    wire = service.create(TokenKind.OFFLINE)
    client.cookies.set("access_token", wire)

    response = client.get("/me")

    assert response.status_code == 200


def test_missing_token_is_unauthorized(client):
    response = client.get("/me")
    assert response.status_code == 401
    assert response.json()["detail"] == "Not authenticated"


def test_invalid_tokens_share_one_response(client, service, clock):
    wire = service.create(TokenKind.ACCESS)

    garbled = client.get("/me", headers={"Authorization": "Bearer YWNjnot-a-token"})
    clock.advance(25 * HOUR_MS)
    expired = client.get("/me", headers={"Authorization": f"Bearer {wire}"})

    assert garbled.status_code == expired.status_code == 401
    assert garbled.json() == expired.json()


def test_store_outage_is_service_unavailable(codec, policy, clock):
    issuer = TokenService(codec=codec, policy=policy, store=UnavailableStore(), clock=clock)
    wire = codec.encode(
        TokenKind.ACCESS,
        TokenId.generate(clock()),
        policy.ttl_for(TokenKind.ACCESS),
    )
    client = _client(issuer)

    response = client.get("/me", headers={"Authorization": f"Bearer {wire}"})
    optional = client.get("/maybe", headers={"Authorization": f"Bearer {wire}"})

    assert response.status_code == 503
    assert optional.status_code == 503


def test_optional_token(client, service):
    wire = service.create(TokenKind.ACCESS)

    assert client.get("/maybe").json() == {"anonymous": True}
    assert client.get("/maybe", headers={"Authorization": "Bearer junk"}).json() == {"anonymous": True}
    assert client.get("/maybe", headers={"Authorization": f"Bearer {wire}"}).json() == {"anonymous": False}
