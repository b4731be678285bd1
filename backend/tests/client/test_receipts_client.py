"""Tests for receipt id resolution and the receipt materializer."""
from datetime import datetime

import httpx
import pytest
import respx
from PIL import Image

from paydesk.client.api import ApiClient
from paydesk.client.receipts import ReceiptMaterializer, ReceiptTarget, resolve_receipt_id

BASE = "http://paydesk.test"


class TestResolveReceiptId:
    def test_nested_receipt_id_wins(self):
        source = {"receipt": {"receiptId": "r-nested"}, "receiptId": "r-top", "id": "p1"}
        assert resolve_receipt_id(source) == ReceiptTarget("r-nested")

    def test_top_level_receipt_id(self):
        assert resolve_receipt_id({"receiptId": "r-top", "id": "p1"}) == ReceiptTarget("r-top")

    def test_payment_id_is_marked_fallback(self):
        assert resolve_receipt_id({"id": "p1"}) == ReceiptTarget("p1", payment_linked=True)
        assert resolve_receipt_id({"paymentId": "p2"}) == ReceiptTarget("p2", payment_linked=True)

    def test_nothing_to_resolve(self):
        with pytest.raises(ValueError):
            resolve_receipt_id({"receipt": {}})


class TestDownload:
    def test_requests_exact_receipt_id(self, tmp_path):
        with respx.mock(base_url=BASE) as mock:
            route = mock.get("/api/receipt/download/r-123").mock(
                return_value=httpx.Response(200, content=b"%PDF-1.4 test"),
            )
            path = ReceiptMaterializer(ApiClient(base_url=BASE)).download(
                {"receipt": {"receiptId": "r-123", "receiptNumber": "AKRX-20250108-0001"}, "id": "p1"}, tmp_path,
            )
        assert route.call_count == 1
        assert path.name == "receipt-AKRX-20250108-0001.pdf"
        assert path.read_bytes() == b"%PDF-1.4 test"

    def test_payment_fallback_uses_payment_route(self, tmp_path):
        with respx.mock(base_url=BASE) as mock:
            mock.get("/api/receipt/payment/p1/pdf").mock(return_value=httpx.Response(
                200, content=b"%PDF", headers={"X-Receipt-Number": "AKRX-20250108-0002"},
            ))
            path = ReceiptMaterializer(ApiClient(base_url=BASE)).download({"id": "p1"}, tmp_path)
        assert path.name == "receipt-AKRX-20250108-0002.pdf"

    def test_timestamp_name_when_number_unknown(self, tmp_path):
        with respx.mock(base_url=BASE) as mock:
            mock.get("/api/receipt/download/r-9").mock(return_value=httpx.Response(200, content=b"%PDF"))
            path = ReceiptMaterializer(ApiClient(base_url=BASE)).download({"receiptId": "r-9"}, tmp_path)
        assert path.name.startswith("receipt-")
        assert path.name[len("receipt-"):-len(".pdf")].isdigit()

    def test_against_backend(self, client, paid_receipt, tmp_path):
        api = ApiClient(base_url="http://testserver", client=client)
        path = ReceiptMaterializer(api).download(paid_receipt, tmp_path)
        direct = client.get(f"/api/receipt/download/{paid_receipt['receiptId']}").content
        assert path.read_bytes() == direct


class TestRenderLocal:
    def test_tiles_image_into_pdf(self, tmp_path):
        image = Image.new("RGB", (800, 3000), "white")
        when = datetime(2025, 1, 8, 12, 0)
        path = ReceiptMaterializer(ApiClient(base_url=BASE)).render_local(image, tmp_path, "AKRX-20250108-0001", when)
        content = path.read_bytes()
        assert path.name == "receipt-AKRX-20250108-0001.pdf"
        assert content.startswith(b"%PDF")
        assert b"/Count 3" in content


class TestEmail:
    def test_reports_backend_message(self):
        with respx.mock(base_url=BASE) as mock:
            route = mock.post("/api/receipt/send-email/r-1").mock(
                return_value=httpx.Response(200, json={"success": False, "message": "Email delivery is not configured"}),
            )
            message = ReceiptMaterializer(ApiClient(base_url=BASE)).email({"receiptId": "r-1"})
        assert route.call_count == 1
        assert message == "Failed to send emails: Email delivery is not configured"

    def test_success(self):
        with respx.mock(base_url=BASE) as mock:
            mock.post("/api/receipt/send-email/r-1").mock(
                return_value=httpx.Response(200, json={"success": True, "message": "ok"}),
            )
            message = ReceiptMaterializer(ApiClient(base_url=BASE)).email({"receipt": {"receiptId": "r-1"}})
        assert message == "Receipt emails sent successfully"

    def test_network_failure_is_a_message(self):
        with respx.mock(base_url=BASE) as mock:
            mock.post("/api/receipt/send-email/r-1").mock(side_effect=httpx.ConnectError("down"))
            message = ReceiptMaterializer(ApiClient(base_url=BASE)).email({"receiptId": "r-1"})
        assert message.startswith("Failed to send emails")
