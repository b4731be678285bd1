"""API tests for receipt lookup, PDF download, direct receipts and email."""
import json
from unittest.mock import MagicMock

from paydesk.main import app
from paydesk.models.audit import PaymentEvent
from paydesk.models.payment import Payment
from paydesk.models.receipt import Receipt
from paydesk.routes.receipt import get_email_service
from paydesk.utils.rate_limiter import _rate_limit_store

DIRECT = {
    "customerName": "Ravi Kumar",
    "customerEmail": "ravi@example.com",
    "customerPhone": "9988776655",
    "customerAddress": "3 Park Street, Kolkata",
    "amount": 2500,
    "paymentMode": "cash",
    "description": "Workshop fee",
}


class TestReceiptLookup:
    def test_get_receipt_with_payment_and_user(self, client, paid_receipt):
        response = client.get(f"/api/receipt/{paid_receipt['receiptId']}")
        assert response.status_code == 200
        body = response.json()
        assert body["receipt"]["receiptNumber"] == paid_receipt["receiptNumber"]
        assert body["payment"]["amount"] == 1500
        assert body["payment"]["status"] == "success"
        assert body["user"]["name"] == "John Doe"

    def test_unknown_receipt(self, client):
        assert client.get("/api/receipt/missing").status_code == 404


class TestDownload:
    def test_pdf_with_receipt_filename(self, client, paid_receipt):
        response = client.get(f"/api/receipt/download/{paid_receipt['receiptId']}")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
        assert f'filename="receipt-{paid_receipt["receiptNumber"]}.pdf"' in response.headers["content-disposition"]
        assert response.headers["x-receipt-number"] == paid_receipt["receiptNumber"]

    def test_repeat_downloads_are_identical(self, client, paid_receipt):
        first = client.get(f"/api/receipt/download/{paid_receipt['receiptId']}").content
        second = client.get(f"/api/receipt/download/{paid_receipt['receiptId']}").content
        assert first == second

    def test_download_by_payment(self, client, paid_receipt):
        by_receipt = client.get(f"/api/receipt/download/{paid_receipt['receiptId']}")
        by_payment = client.get(f"/api/receipt/payment/{paid_receipt['payment']['id']}/pdf")
        assert by_payment.status_code == 200
        assert by_payment.content == by_receipt.content

    def test_pending_payment_has_no_receipt(self, client):
        body = client.post("/api/payment/initiate", json={
            "name": "John Doe", "email": "john@example.com", "phone": "9876543210",
            "address": "12 MG Road, Pune", "amount": 10, "paymentMode": "card",
        }).json()
        assert client.get(f"/api/receipt/payment/{body['paymentId']}/pdf").status_code == 404


class TestDirectReceipt:
    def test_generates_settled_payment_and_pdf(self, client, db_session):
        response = client.post("/api/receipt/generate", json=DIRECT)
        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")
        number = response.headers["x-receipt-number"]
        assert f'receipt-{number}.pdf' in response.headers["content-disposition"]

        receipt = db_session.query(Receipt).filter(Receipt.receipt_number == number).one()
        payment = db_session.query(Payment).filter(Payment.id == receipt.payment_id).one()
        assert payment.status == "success"
        assert payment.payment_mode == "cash"
        assert payment.razorpay_order_id is None

    def test_validation_errors(self, client):
        response = client.post("/api/receipt/generate", json={**DIRECT, "customerPhone": "12", "amount": -1})
        assert response.status_code == 422
        fields = {err["loc"][-1] for err in response.json()["detail"]}
        assert {"customerPhone", "amount"} <= fields

    def test_unknown_mode_rejected(self, client):
        assert client.post("/api/receipt/generate", json={**DIRECT, "paymentMode": "barter"}).status_code == 422

    def test_non_finite_amount_rejected(self, client, db_session):
        for amount in (float("inf"), float("nan")):
            body = json.dumps({**DIRECT, "amount": amount})
            response = client.post("/api/receipt/generate", content=body, headers={"Content-Type": "application/json"})
            assert response.status_code == 422
        assert db_session.query(Receipt).count() == 0


class TestSendEmail:
    def test_budget_is_shared_across_receipt_ids(self, client):
        statuses = [client.post(f"/api/receipt/send-email/missing-{i}").status_code for i in range(6)]
        assert statuses == [404] * 5 + [429]
        assert list(_rate_limit_store) == [("testclient", "/api/receipt/send-email/{receipt_id}")]

    def test_sends_to_customer_and_merchant(self, client, paid_receipt, db_session, settings):
        mailer = MagicMock()
        mailer.send.return_value = (True, "Receipt emailed")
        app.dependency_overrides[get_email_service] = lambda: mailer

        response = client.post(f"/api/receipt/send-email/{paid_receipt['receiptId']}")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["recipients"] == ["john@example.com", settings.MERCHANT_EMAIL]

        kwargs = mailer.send.call_args.kwargs
        assert kwargs["filename"] == f"receipt-{paid_receipt['receiptNumber']}.pdf"
        assert kwargs["attachment"].startswith(b"%PDF")
        assert "Rs. 1,500" in kwargs["body"]

        actions = [e.action for e in db_session.query(PaymentEvent).order_by(PaymentEvent.id)]
        assert actions[-1] == "RECEIPT_EMAILED"

    def test_failure_is_reported_not_retried(self, client, paid_receipt):
        mailer = MagicMock()
        mailer.send.return_value = (False, "Failed to send email: connection refused")
        app.dependency_overrides[get_email_service] = lambda: mailer

        body = client.post(f"/api/receipt/send-email/{paid_receipt['receiptId']}").json()
        assert body["success"] is False
        assert "connection refused" in body["message"]
        assert mailer.send.call_count == 1

    def test_unconfigured_smtp(self, client, paid_receipt):
        body = client.post(f"/api/receipt/send-email/{paid_receipt['receiptId']}").json()
        assert body == {"success": False, "message": "Email delivery is not configured", "recipients": []}
