"""API tests for QR payments confirmed by UTR."""
import json
import os
import re

from paydesk.models.payment import Payment
from paydesk.models.receipt import Receipt

CUSTOMER = {
    "name": "Asha Rao",
    "email": "asha@example.com",
    "phone": "9123456780",
    "address": "7 Residency Road, Bengaluru",
}
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _qr_payment(client, amount=500):
    response = client.post("/api/payment/qr-payment", json={**CUSTOMER, "amount": amount})
    assert response.status_code == 200
    return response.json()


def _submit(client, payment_id, utr="123456789012", content=PNG, content_type="image/png"):
    return client.post(
        "/api/payment/verify-utr",
        data={"paymentId": payment_id, "utrNumber": utr},
        files={"screenshot": ("paid.png", content, content_type)},
    )


class TestQRPayment:
    def test_creates_pending_upi_payment(self, client, db_session, settings):
        body = _qr_payment(client)
        assert body["success"] is True
        assert body["amount"] == 500
        assert body["qrData"].startswith(f"upi://pay?pa={settings.UPI_VPA.replace('@', '%40')}")
        assert "am=500.00" in body["qrData"]

        payment = db_session.query(Payment).filter(Payment.id == body["paymentId"]).one()
        assert payment.status == "pending"
        assert payment.payment_mode == "upi"

    def test_infinite_amount_is_rejected(self, client, db_session):
        body = json.dumps({**CUSTOMER, "amount": float("inf")})
        response = client.post("/api/payment/qr-payment", content=body, headers={"Content-Type": "application/json"})
        assert response.status_code == 422
        assert db_session.query(Payment).count() == 0


class TestVerifyUTR:
    def test_utr_and_screenshot_settle_payment(self, client, db_session, settings):
        payment_id = _qr_payment(client)["paymentId"]
        response = _submit(client, payment_id)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["utrNumber"] == "123456789012"
        assert re.fullmatch(r"AKRX-\d{8}-\d{4}", body["receipt"]["receiptNumber"])
        assert body["receipt"]["amount"] == 500

        payment = db_session.query(Payment).filter(Payment.id == payment_id).one()
        assert payment.status == "success"
        assert os.path.isfile(payment.screenshot_path)
        assert payment.screenshot_path.startswith(settings.UPLOAD_DIR)

    def test_empty_utr_is_rejected(self, client, db_session):
        payment_id = _qr_payment(client)["paymentId"]
        response = _submit(client, payment_id, utr="   ")
        assert response.status_code == 400
        assert db_session.query(Payment).filter(Payment.id == payment_id).one().status == "pending"

    def test_malformed_utr_is_rejected(self, client):
        payment_id = _qr_payment(client)["paymentId"]
        assert _submit(client, payment_id, utr="12-34").status_code == 400

    def test_missing_screenshot_is_rejected(self, client):
        payment_id = _qr_payment(client)["paymentId"]
        response = client.post("/api/payment/verify-utr", data={"paymentId": payment_id, "utrNumber": "123456789012"})
        assert response.status_code == 422

    def test_empty_screenshot_is_rejected(self, client):
        payment_id = _qr_payment(client)["paymentId"]
        assert _submit(client, payment_id, content=b"").status_code == 400

    def test_non_image_screenshot_is_rejected(self, client):
        payment_id = _qr_payment(client)["paymentId"]
        response = _submit(client, payment_id, content=b"%PDF-1.4", content_type="application/pdf")
        assert response.status_code == 400

    def test_oversize_screenshot_is_rejected(self, client, settings, monkeypatch):
        monkeypatch.setattr(settings, "MAX_SCREENSHOT_MB", 0)
        payment_id = _qr_payment(client)["paymentId"]
        assert _submit(client, payment_id).status_code == 413

    def test_utr_cannot_be_reused(self, client, db_session):
        first = _qr_payment(client)["paymentId"]
        second = _qr_payment(client)["paymentId"]
        assert _submit(client, first).status_code == 200

        response = _submit(client, second)
        assert response.status_code == 409
        assert db_session.query(Payment).filter(Payment.id == second).one().status == "pending"
        assert db_session.query(Receipt).count() == 1

    def test_settled_payment_rejects_second_utr(self, client):
        payment_id = _qr_payment(client)["paymentId"]
        assert _submit(client, payment_id).status_code == 200
        assert _submit(client, payment_id, utr="ABCDEF123456").status_code == 409

    def test_unknown_payment(self, client):
        assert _submit(client, "missing").status_code == 404
