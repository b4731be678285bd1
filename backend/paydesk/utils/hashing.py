"""
Cryptographic Hashing Utilities — SHA-256 payload hashing and HMAC signatures.
"""
import hashlib
import hmac
import json


def generate_hash(data: dict) -> str:
    """Generate a SHA-256 hash of a dictionary (deterministic, sorted keys)."""
    canonical = json.dumps(data, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(canonical).hexdigest()


def generate_chain_hash(current_data: dict, previous_hash: str = "") -> str:
    """Generate a chain hash: SHA-256(previous_hash + current_payload)."""
    current_hash = generate_hash(current_data)
    chain_input = f"{previous_hash}{current_hash}".encode("utf-8")
    return hashlib.sha256(chain_input).hexdigest()


def hmac_sha256(secret: str, message: str) -> str:
    """Hex HMAC-SHA256 of message under secret."""
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def signatures_match(expected: str, provided: str | None) -> bool:
    """Constant-time comparison of two hex signatures."""
    if not provided:
        return False
    return hmac.compare_digest(expected, provided)
