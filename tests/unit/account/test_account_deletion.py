"""Tests for account deletion."""

from pathlib import Path
from types import SimpleNamespace
from uuid import uuid4

import pytest

from saaskit.core.modules.account.service import AccountService
from saaskit.core.modules.session.models import IdentitySnapshot
from saaskit.core.modules.storage.service import StorageService, get_user_objects_path
from saaskit.errors import ExternalServiceError, NotFoundError


class FakeBilling:
    def __init__(self, enabled: bool = True, fail: bool = False) -> None:
        self.enabled = enabled
        self.fail = fail
        self.cancelled: list[str] = []

    async def cancel_customer(self, customer_id: str) -> None:
        if self.fail:
            raise ExternalServiceError("Stripe request failed: 500")
        self.cancelled.append(customer_id)


def make_account_service(config, users, session_service, billing):
    core = SimpleNamespace(config=config)
    storage = StorageService()
    storage.set_core(core)
    core.services = SimpleNamespace(user=users, session=session_service, billing=billing, storage=storage)
    account = AccountService()
    account.set_core(core)
    return account


def write_object(config, user_id, key: str) -> Path:
    path = get_user_objects_path(config.storage_path, user_id) / key
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"data")
    return path


async def start_session(session_service, user):
    return await session_service.create_session(
        IdentitySnapshot(user_id=user.id, user_email=user.email, user_name=user.name)
    )


async def test_deletes_everything_owned_by_user(config, users, session_service, store):
    billing = FakeBilling()
    account = make_account_service(config, users, session_service, billing)
    user = users.add(billing_customer_id="cus_123")
    other = users.add(email="bob@example.com", name="Bob")
    await start_session(session_service, user)
    await start_session(session_service, user)
    kept_session = await start_session(session_service, other)
    stored = write_object(config, user.id, "avatar.png")

    await account.delete_account(user.id)

    assert billing.cancelled == ["cus_123"]
    assert not stored.exists()
    assert user.id not in users.users
    assert other.id in users.users
    assert list(store.records) == [kept_session]


async def test_billing_failure_does_not_block_deletion(config, users, session_service, store):
    account = make_account_service(config, users, session_service, FakeBilling(fail=True))
    user = users.add(billing_customer_id="cus_123")
    await start_session(session_service, user)

    await account.delete_account(user.id)

    assert user.id not in users.users
    assert store.records == {}


async def test_billing_skipped_when_disabled(config, users, session_service):
    billing = FakeBilling(enabled=False)
    account = make_account_service(config, users, session_service, billing)
    user = users.add(billing_customer_id="cus_123")

    await account.delete_account(user.id)

    assert billing.cancelled == []


async def test_unknown_user(config, users, session_service):
    account = make_account_service(config, users, session_service, FakeBilling())
    with pytest.raises(NotFoundError):
        await account.delete_account(uuid4())


def test_delete_account_route(client, store, users, signed_in):
    user, session = signed_in
    client.cookies.set("app_session", session.id)

    response = client.delete("/api/account")

    assert response.status_code == 200
    assert response.json()["message"] == "Account and all associated data have been permanently deleted"
    assert "app_session=; Path=/; HttpOnly; Max-Age=0; SameSite=Lax" in response.headers.get_list("set-cookie")
    assert user.id not in users.users
    assert store.records == {}


def test_delete_account_requires_session(client):
    assert client.delete("/api/account").status_code == 401


class TestSubscriptionRoutesWithoutStripe:
    def test_status_reports_not_configured(self, client, signed_in):
        _, session = signed_in
        client.cookies.set("app_session", session.id)

        response = client.get("/api/subscription/status")

        assert response.status_code == 200
        assert response.json() == {"is_pro": False, "status": "not_configured", "subscription_id": None}

    @pytest.mark.parametrize("path", ["/api/subscription/checkout", "/api/subscription/portal"])
    def test_checkout_and_portal_rejected(self, client, signed_in, path):
        _, session = signed_in
        client.cookies.set("app_session", session.id)

        response = client.post(path, json={})

        assert response.status_code == 400
        assert response.json() == {"message": "Stripe not configured", "type": "validation_error"}
