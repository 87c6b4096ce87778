from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from wallet_monitor.db import models as orm
from wallet_monitor.infrastructure.wallet import WalletApiStatusError, WalletApiUnreachableError
from wallet_monitor.modules.balances import BalanceService


class TestWebhookEndpoint:
    def test_liveness_methods(self, client, seed):
        seed.network("hook")

        assert client.get("/api/webhook/hook").json()["status"] == "ok"
        assert client.head("/api/webhook/hook").status_code == 200
        response = client.put("/api/webhook/hook", json={})
        assert response.status_code == 405

    def test_unknown_prefix_is_404(self, client):
        response = client.post("/api/webhook/nowhere", json={"transaction_id": "T1"})
        assert response.status_code == 404

    def test_duplicate_delivery_is_acknowledged(self, client, seed):
        network_id = seed.network("hook")
        seed.account(network_id, "hook-main", "0811111111")
        body = {"transaction_id": "H1", "amount": 1500, "recipient_mobile": "0811111111"}

        first = client.post("/api/webhook/hook", json=body)
        second = client.post("/api/webhook/hook", json=body)

        assert first.status_code == 200
        assert first.json() == {"status": "ok"}
        assert second.status_code == 200
        assert second.json()["message"] == "Transaction already processed"
        assert seed.count(orm.FinancialTransaction) == 1

    def test_unroutable_and_disabled_are_200(self, client, seed):
        busy = seed.network("busy")
        seed.account(busy, "a", "0811111111")
        seed.account(busy, "b", "0822222222")
        muted = seed.network("muted", webhook_enabled=False)
        seed.account(muted, "c", "0833333333")

        ignored = client.post("/api/webhook/busy", json={"transaction_id": "B1", "amount": 10})
        discarded = client.post("/api/webhook/muted", json={"transaction_id": "M1", "amount": 10})

        assert (ignored.status_code, ignored.json()["status"]) == (200, "ignored")
        assert (discarded.status_code, discarded.json()["status"]) == (200, "discarded")
        assert seed.count(orm.FinancialTransaction) == 0

    def test_handshake(self, client, seed):
        seed.network("hook")
        response = client.post("/api/webhook/hook", json={"server": "handshake"})
        assert response.json() == {"status": "ok", "message": "Handshake accepted"}

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", '"Infinity"', '"-inf"'])
    def test_non_finite_amount_is_not_a_server_error(self, client, seed, amount):
        network_id = seed.network("odd")
        seed.account(network_id, "odd-main", "0811111111")
        body = '{"transaction_id": "N1", "amount": %s, "recipient_mobile": "0811111111"}' % amount

        response = client.post(
            "/api/webhook/odd",
            content=body,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 200
        rows = seed.rows(orm.FinancialTransaction)
        assert [row.amount_minor_units for row in rows] == [0]

    def test_storage_failure_asks_sender_to_retry(self, client, seed, monkeypatch):
        network_id = seed.network("hook")
        seed.account(network_id, "hook-main", "0811111111")
        monkeypatch.setattr(
            BalanceService,
            "record_transaction",
            AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("disk I/O error"))),
        )

        response = client.post(
            "/api/webhook/hook",
            json={"transaction_id": "F1", "amount": 100, "recipient_mobile": "0811111111"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Internal processing error"}
        assert seed.count(orm.FinancialTransaction) == 0


class TestManualCheckEndpoint:
    def test_check_returns_balance(self, client, seed, fake_wallet):
        network_id = seed.network("shop")
        account_id = seed.account(network_id, "shop-main", "0811111111")
        fake_wallet.set_balance(account_id, 150050)

        first = client.post(f"/api/tenant/shop/accounts/{account_id}/check")
        second = client.post(f"/api/tenant/shop/accounts/{account_id}/check")

        assert first.status_code == 200
        body = first.json()
        assert body["balance"] == 1500.5
        assert body["balanceMinorUnits"] == 150050
        assert body["mobileNo"] == "0811111111"
        assert body["changed"] is True
        assert "checkedAt" in body
        assert second.json()["changed"] is False

    def test_unreachable_wallet(self, client, seed, fake_wallet):
        network_id = seed.network("shop")
        account_id = seed.account(network_id, "shop-main")
        fake_wallet.errors[account_id] = WalletApiUnreachableError("timeout")

        response = client.post(f"/api/tenant/shop/accounts/{account_id}/check")

        assert response.status_code == 502
        assert response.json()["detail"]["code"] == "WALLET_API_UNREACHABLE"

    def test_wallet_rejected_request(self, client, seed, fake_wallet):
        network_id = seed.network("shop")
        account_id = seed.account(network_id, "shop-main")
        fake_wallet.errors[account_id] = WalletApiStatusError(401)

        response = client.post(f"/api/tenant/shop/accounts/{account_id}/check")

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["code"] == "WALLET_API_ERROR"
        assert detail["upstreamStatus"] == 401

    def test_unknown_account(self, client, seed):
        seed.network("shop")

        response = client.post("/api/tenant/shop/accounts/does-not-exist/check")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "ACCOUNT_NOT_FOUND"


class TestBalanceReads:
    def test_latest_balance_before_and_after_check(self, client, seed, fake_wallet):
        network_id = seed.network("shop")
        account_id = seed.account(network_id, "shop-main")
        fake_wallet.set_balance(account_id, 990)

        empty = client.get(f"/api/tenant/shop/accounts/{account_id}/balance")
        client.post(f"/api/tenant/shop/accounts/{account_id}/check")
        latest = client.get(f"/api/tenant/shop/accounts/{account_id}/balance")

        assert empty.json()["hasData"] is False
        assert latest.json()["hasData"] is True
        assert latest.json()["balanceMinorUnits"] == 990
        assert latest.json()["source"] == "manual_check"

    def test_history_merges_kinds(self, client, seed, fake_wallet):
        network_id = seed.network("shop")
        account_id = seed.account(network_id, "shop-main", "0811111111")
        fake_wallet.set_balance(account_id, 990)
        client.post(f"/api/tenant/shop/accounts/{account_id}/check")
        client.post("/api/webhook/shop", json={"transaction_id": "W1", "amount": 10})

        response = client.get(f"/api/tenant/shop/accounts/{account_id}/history", params={"pageSize": 10})

        body = response.json()
        assert body["total"] == 2
        assert body["totalPages"] == 1
        assert sorted(item["kind"] for item in body["items"]) == ["snapshot", "transaction"]

    def test_invalid_paging_is_validation_error(self, client, seed):
        network_id = seed.network("shop")
        account_id = seed.account(network_id, "shop-main")

        response = client.get(f"/api/tenant/shop/accounts/{account_id}/history", params={"page": 0})

        assert response.status_code == 400
        body = response.json()
        assert body["ok"] is False
        assert body["error"] == "VALIDATION_ERROR"
        assert body["fields"][0]["field"] == "page"


class TestCronAndStatus:
    def test_cron_requires_secret(self, client):
        assert client.get("/api/cron/check-balances").status_code == 401
        wrong = client.get("/api/cron/check-balances", headers={"Authorization": "Bearer nope"})
        assert wrong.status_code == 401

    def test_cron_checks_every_active_account(self, client, seed, fake_wallet, settings):
        network_id = seed.network("shop")
        first = seed.account(network_id, "one")
        second = seed.account(network_id, "two")
        fake_wallet.set_balance(first, 100)
        fake_wallet.errors[second] = WalletApiUnreachableError("down")

        response = client.get(
            "/api/cron/check-balances",
            headers={"Authorization": f"Bearer {settings.cron_secret}"},
        )

        body = response.json()
        assert response.status_code == 200
        assert (body["total"], body["success"], body["failed"], body["changed"]) == (2, 1, 1, 1)
        rows = seed.rows(orm.BalanceSnapshot)
        assert [row.source for row in rows] == ["cron_check"]

    def test_cron_accepts_query_secret(self, client, settings):
        response = client.get("/api/cron/check-balances", params={"secret": settings.cron_secret})
        assert response.status_code == 200
        assert response.json()["total"] == 0

    def test_stream_of_unknown_account_is_404(self, client):
        assert client.get("/api/sse/balance/missing").status_code == 404

    def test_stream_status_and_health(self, client):
        assert client.get("/api/sse/status").json() == {"ok": True, "clients": {}}
        health = client.get("/api/health").json()
        assert health["status"] == "ok"
        assert health["pollerRunning"] is False
        assert health["pollingNetworks"] == 0
