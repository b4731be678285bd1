"""
Admin Client — Dashboard calls made on behalf of a logged-in administrator.
"""
from pathlib import Path
from typing import Optional

from paydesk.client.api import ApiClient
from paydesk.client.receipts import ReceiptMaterializer


class AdminClient:
    def __init__(self, api: ApiClient):
        self.api = api

    def login(self, username: str, password: str) -> str:
        data = self.api.post_json("/api/admin/login", {"username": username, "password": password})
        self.api.token = data["token"]
        return self.api.token

    def stats(self) -> dict:
        return self.api.get_json("/api/admin/stats")

    def receipts(self, search: Optional[str] = None, limit: int = 50, offset: int = 0) -> dict:
        params = {"limit": limit, "offset": offset}
        if search:
            params["search"] = search
        return self.api.get_json("/api/admin/receipts", params=params)

    def download(self, row: dict, directory) -> Path:
        """Re-download the PDF for a row of the receipts table."""
        return ReceiptMaterializer(self.api).download(
            {"receiptId": row["id"], "receiptNumber": row.get("receiptNumber")}, directory,
        )
