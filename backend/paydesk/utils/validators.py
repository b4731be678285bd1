"""
Validators — Regex and rule-based validation for customer and payment fields.
Shared by the API schemas and the client-side form collector.
"""
import re

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
UTR_PATTERN = re.compile(r"^[A-Za-z0-9]{6,30}$")


def as_text(value) -> str:
    """Form values may arrive as numbers; None becomes an empty string."""
    return "" if value is None else str(value)


def validate_email(email) -> bool:
    """Validate email against an RFC-style local@domain.tld pattern."""
    email = as_text(email).strip()
    return bool(email) and bool(EMAIL_PATTERN.match(email))


def normalize_phone(phone) -> str:
    """Strip spaces, dashes, parentheses and an Indian +91 / 0 prefix."""
    digits = re.sub(r"[\s\-()]", "", as_text(phone).strip())
    if digits.startswith("+91"):
        digits = digits[3:]
    elif len(digits) == 11 and digits.startswith("0"):
        digits = digits[1:]
    return digits


def validate_phone(phone) -> bool:
    """Validate phone: exactly 10 digits after normalization."""
    return bool(re.fullmatch(r"\d{10}", normalize_phone(phone)))


def validate_amount(amount) -> tuple[bool, str]:
    """Validate a payment amount: numeric and strictly positive."""
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return False, "Amount must be a number"
    if value != value or value in (float("inf"), float("-inf")):
        return False, "Amount must be a number"
    if value <= 0:
        return False, "Amount must be greater than 0"
    return True, "Valid"


def validate_utr(utr) -> bool:
    """Validate a bank UTR reference: 6-30 alphanumeric characters."""
    return bool(UTR_PATTERN.match(as_text(utr).strip()))


def validate_upi_vpa(vpa) -> bool:
    """Validate UPI VPA format: user@provider."""
    return bool(re.match(r"^[\w.-]+@[\w]+$", as_text(vpa).strip()))


def sanitize_text(value) -> str:
    """Collapse internal whitespace and trim."""
    return re.sub(r"\s+", " ", as_text(value)).strip()
