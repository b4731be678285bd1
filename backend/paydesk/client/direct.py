"""
Direct Receipt Flow — Receipts for payments taken offline (cash, cheque,
bank transfer...). No gateway is involved.
"""
import logging
from pathlib import Path
from typing import Mapping

from paydesk.client.api import ApiClient
from paydesk.client.form import FormCollector
from paydesk.utils.formatting import receipt_filename

logger = logging.getLogger(__name__)


class DirectReceiptFlow:
    def __init__(self, api: ApiClient):
        self.api = api
        self.collector = FormCollector.for_direct_receipts()

    def generate(self, raw: Mapping, directory) -> Path:
        """Validate, record the payment and save the returned PDF. Raises FormValidationError or ApiError."""
        request = self.collector.collect(raw)
        response = self.api.post_for_bytes("/api/receipt/generate", request.to_direct_payload())

        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / receipt_filename(response.headers.get("X-Receipt-Number"))
        path.write_bytes(response.content)
        logger.info("Direct receipt saved to %s", path)
        return path
