"""API tests for the admin dashboard."""
import pytest


@pytest.fixture()
def two_receipts(client, paid_receipt):
    direct = client.post("/api/receipt/generate", json={
        "customerName": "Ravi Kumar",
        "customerEmail": "ravi@example.com",
        "customerPhone": "9988776655",
        "customerAddress": "3 Park Street, Kolkata",
        "amount": 2500,
        "paymentMode": "cheque",
    })
    assert direct.status_code == 200
    return paid_receipt, direct.headers["x-receipt-number"]


class TestLogin:
    def test_valid_credentials_issue_token(self, client, settings):
        response = client.post("/api/admin/login", json={
            "username": settings.ADMIN_USERNAME, "password": settings.ADMIN_PASSWORD,
        })
        assert response.status_code == 200
        token = response.json()["token"]
        stats = client.get("/api/admin/stats", headers={"Authorization": f"Bearer {token}"})
        assert stats.status_code == 200

    def test_wrong_password(self, client, settings):
        response = client.post("/api/admin/login", json={"username": settings.ADMIN_USERNAME, "password": "nope"})
        assert response.status_code == 401

    def test_routes_require_token(self, client):
        assert client.get("/api/admin/stats").status_code == 401
        assert client.get("/api/admin/receipts").status_code == 401
        assert client.get("/api/admin/stats", headers={"Authorization": "Bearer forged.token"}).status_code == 401


class TestStats:
    def test_overview_counts_and_revenue(self, client, admin_headers, two_receipts):
        # One pending payment that never settles
        client.post("/api/payment/qr-payment", json={
            "name": "Asha Rao", "email": "asha@example.com", "phone": "9123456780",
            "address": "7 Residency Road, Bengaluru", "amount": 999,
        })
        body = client.get("/api/admin/stats", headers=admin_headers).json()
        overview = body["overview"]
        assert overview["totalPayments"] == 3
        assert overview["successfulPayments"] == 2
        assert overview["totalReceipts"] == 2
        assert overview["totalUsers"] == 3
        assert overview["totalRevenue"] == 4000
        assert overview["successRate"] == pytest.approx(66.67)

        assert len(body["recentPayments"]) == 3
        assert body["monthlyStats"][-1]["payments"] == 2
        assert body["monthlyStats"][-1]["revenue"] == 4000
        assert body["modeDistribution"] == {"card": 1, "cheque": 1}

    def test_empty_dashboard(self, client, admin_headers):
        overview = client.get("/api/admin/stats", headers=admin_headers).json()["overview"]
        assert overview["totalPayments"] == 0
        assert overview["successRate"] == 0


class TestReceiptsTable:
    def test_lists_newest_first(self, client, admin_headers, two_receipts):
        paid, direct_number = two_receipts
        body = client.get("/api/admin/receipts", headers=admin_headers).json()
        assert body["total"] == 2
        numbers = [r["receiptNumber"] for r in body["receipts"]]
        assert numbers == [direct_number, paid["receiptNumber"]]
        row = body["receipts"][0]
        assert row["payment"]["paymentMode"] == "cheque"
        assert row["payment"]["user"] == {"name": "Ravi Kumar", "email": "ravi@example.com"}

    def test_search_by_name_email_or_number(self, client, admin_headers, two_receipts):
        paid, _ = two_receipts
        for term in ("ravi", "RAVI@EXAMPLE", "john doe", paid["receiptNumber"]):
            body = client.get("/api/admin/receipts", params={"search": term}, headers=admin_headers).json()
            assert body["total"] == 1, term

    def test_pagination(self, client, admin_headers, two_receipts):
        body = client.get("/api/admin/receipts", params={"limit": 1, "offset": 1}, headers=admin_headers).json()
        assert body["total"] == 2
        assert len(body["receipts"]) == 1


class TestPaymentEvents:
    def test_trail_and_chain(self, client, admin_headers, paid_receipt):
        payment_id = paid_receipt["payment"]["id"]
        events = client.get(f"/api/admin/payments/{payment_id}/events", headers=admin_headers).json()
        assert [e["action"] for e in events] == ["INITIATED", "VERIFIED", "RECEIPT_ISSUED"]

        chain = client.get(f"/api/admin/payments/{payment_id}/events/verify", headers=admin_headers).json()
        assert chain["valid"] is True
        assert chain["total_entries"] == 3

    def test_unknown_payment(self, client, admin_headers):
        assert client.get("/api/admin/payments/missing/events", headers=admin_headers).status_code == 404
