"""
Audit Service — Hash-chained event trail per payment.

Each event stores SHA-256(previous event hash + hash of its payload), so
editing or deleting an earlier event breaks every later link.
"""
from datetime import datetime
from typing import Optional, Dict

from sqlalchemy.orm import Session

from paydesk.models.audit import PaymentEvent
from paydesk.utils.hashing import generate_chain_hash


class AuditService:
    """Appends events inside the caller's transaction (flush, never commit)."""

    @staticmethod
    def last_hash(db: Session, payment_id: str) -> str:
        previous = (
            db.query(PaymentEvent.payload_hash)
            .filter(PaymentEvent.payment_id == payment_id)
            .order_by(PaymentEvent.id.desc())
            .first()
        )
        return previous[0] if previous else ""

    @staticmethod
    def log(
        db: Session,
        payment_id: str,
        action: str,
        payload: Optional[Dict] = None,
        ip_address: Optional[str] = None,
        metadata: Optional[Dict] = None,
    ) -> PaymentEvent:
        """Record `action` for a payment, linked to its previous event.

        `payload` is hashed into the chain; `metadata` is stored as-is for
        display (reasons, file names, receipt ids).
        """
        previous_hash = AuditService.last_hash(db, payment_id)
        event = PaymentEvent(
            payment_id=payment_id,
            action=action,
            payload_hash=generate_chain_hash(payload or {}, previous_hash),
            previous_hash=previous_hash,
            ip_address=ip_address,
            event_metadata=metadata or {},
            timestamp=datetime.utcnow(),
        )
        db.add(event)
        db.flush()
        return event

    @staticmethod
    def get_trail(db: Session, payment_id: str) -> list[PaymentEvent]:
        return (
            db.query(PaymentEvent)
            .filter(PaymentEvent.payment_id == payment_id)
            .order_by(PaymentEvent.id.asc())
            .all()
        )

    @staticmethod
    def verify_chain(db: Session, payment_id: str) -> dict:
        """Walk the trail and report the first event whose back-link is wrong."""
        trail = AuditService.get_trail(db, payment_id)
        expected = ""
        for event in trail:
            if event.previous_hash != expected:
                return {
                    "valid": False,
                    "total_entries": len(trail),
                    "broken_at": event.id,
                    "message": f"Chain broken at event {event.id} ({event.action})",
                }
            expected = event.payload_hash
        return {"valid": True, "total_entries": len(trail), "broken_at": None}
