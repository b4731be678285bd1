from paydesk.utils.hashing import generate_hash, generate_chain_hash, hmac_sha256, signatures_match
from paydesk.utils.validators import validate_email, validate_phone, validate_amount, validate_utr
from paydesk.utils.tiling import page_offsets
from paydesk.utils.formatting import format_inr, receipt_filename

__all__ = [
    "generate_hash", "generate_chain_hash", "hmac_sha256", "signatures_match",
    "validate_email", "validate_phone", "validate_amount", "validate_utr",
    "page_offsets", "format_inr", "receipt_filename",
]
