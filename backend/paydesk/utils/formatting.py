"""
Display formatting for amounts, modes and receipt filenames.
"""
from datetime import datetime


def format_inr(amount: float, symbol: str = "₹") -> str:
    """Format an amount with Indian digit grouping: 1234567.5 -> ₹12,34,567.50.

    Whole amounts are shown without paise (1500 -> ₹1,500).
    """
    negative = amount < 0
    amount = abs(amount)
    rupees = int(amount)
    paise = round((amount - rupees) * 100)
    if paise == 100:
        rupees, paise = rupees + 1, 0

    digits = str(rupees)
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])

    text = f"{symbol}{digits}" + (f".{paise:02d}" if paise else "")
    return f"-{text}" if negative else text


def format_mode(mode: str) -> str:
    """net_banking -> NET BANKING"""
    return mode.replace("_", " ").upper()


def receipt_filename(receipt_number: str | None = None, now: datetime | None = None) -> str:
    """receipt-<receiptNumber>.pdf, or receipt-<unix-millis>.pdf when the number is unknown."""
    if receipt_number:
        return f"receipt-{receipt_number}.pdf"
    now = now or datetime.utcnow()
    return f"receipt-{int(now.timestamp() * 1000)}.pdf"
