"""
Admin Routes — Dashboard metrics, receipts table and payment audit trail.
"""
from collections import OrderedDict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from paydesk.database import get_db
from paydesk.models.audit import PaymentEvent
from paydesk.models.enums import PaymentStatus
from paydesk.models.payment import Payment
from paydesk.models.receipt import Receipt
from paydesk.models.user import User
from paydesk.schemas.schemas import (
    AdminLoginRequest, AdminLoginResponse, AdminOverview, AdminReceiptPayment,
    AdminReceiptRow, AdminReceiptsResponse, AdminReceiptUser, AdminStatsResponse,
    PaymentEventEntry,
)
from paydesk.services.audit_service import AuditService
from paydesk.services.auth_service import AdminAuthService, require_admin
from paydesk.utils.rate_limiter import rate_limit

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.post("/login", response_model=AdminLoginResponse)
def admin_login(
    payload: AdminLoginRequest,
    _throttle: bool = Depends(rate_limit(requests=5, window=300)),
):
    """Exchange admin credentials for a bearer token."""
    if not AdminAuthService.check_credentials(payload.username, payload.password):
        raise HTTPException(status_code=401, detail="Invalid username or password")
    token, expires_at = AdminAuthService.issue_token(payload.username)
    return AdminLoginResponse(token=token, expires_at=expires_at)


@router.get("/stats", response_model=AdminStatsResponse)
def get_stats(db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    """Aggregated dashboard metrics."""
    success = PaymentStatus.SUCCESS.value

    total = db.query(func.count(Payment.id)).scalar() or 0
    successful = db.query(func.count(Payment.id)).filter(Payment.status == success).scalar() or 0
    total_receipts = db.query(func.count(Receipt.id)).scalar() or 0
    total_users = db.query(func.count(User.id)).scalar() or 0
    revenue = db.query(func.coalesce(func.sum(Payment.amount), 0)).filter(Payment.status == success).scalar() or 0

    success_rate = (successful / total * 100) if total > 0 else 0.0

    recent = (
        db.query(Payment)
        .options(joinedload(Payment.user))
        .order_by(Payment.created_at.desc())
        .limit(10)
        .all()
    )
    recent_payments = [
        {
            "id": p.id,
            "amount": p.amount,
            "status": p.status,
            "paymentMode": p.payment_mode,
            "user": {"name": p.user.name, "email": p.user.email},
            "createdAt": p.created_at.isoformat() if p.created_at else None,
        }
        for p in recent
    ]

    # Monthly revenue, last 12 months with activity
    monthly: "OrderedDict[str, dict]" = OrderedDict()
    settled = (
        db.query(Payment.created_at, Payment.amount)
        .filter(Payment.status == success)
        .order_by(Payment.created_at.asc())
        .all()
    )
    for created_at, amount in settled:
        if not created_at:
            continue
        key = created_at.strftime("%Y-%m")
        bucket = monthly.setdefault(key, {"month": key, "payments": 0, "revenue": 0.0})
        bucket["payments"] += 1
        bucket["revenue"] += amount

    modes = (
        db.query(Payment.payment_mode, func.count(Payment.id))
        .filter(Payment.status == success)
        .group_by(Payment.payment_mode)
        .all()
    )

    return AdminStatsResponse(
        overview=AdminOverview(
            total_payments=total,
            successful_payments=successful,
            total_receipts=total_receipts,
            total_users=total_users,
            total_revenue=round(float(revenue), 2),
            success_rate=round(success_rate, 2),
        ),
        recent_payments=recent_payments,
        monthly_stats=list(monthly.values())[-12:],
        mode_distribution={m: c for m, c in modes},
    )


@router.get("/receipts", response_model=AdminReceiptsResponse)
def list_receipts(
    search: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _admin: str = Depends(require_admin),
):
    """Receipts table, newest first; `search` matches receipt number, name or email."""
    query = db.query(Receipt).join(Receipt.payment).join(Payment.user)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(or_(
            Receipt.receipt_number.ilike(term),
            User.name.ilike(term),
            User.email.ilike(term),
        ))

    total = query.count()
    receipts = (
        query.options(joinedload(Receipt.payment).joinedload(Payment.user))
        .order_by(Receipt.generated_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )

    return AdminReceiptsResponse(
        total=total,
        receipts=[
            AdminReceiptRow(
                id=r.id,
                receipt_number=r.receipt_number,
                generated_at=r.generated_at,
                payment=AdminReceiptPayment(
                    amount=r.payment.amount,
                    status=r.payment.status,
                    payment_mode=r.payment.payment_mode,
                    user=AdminReceiptUser(name=r.payment.user.name, email=r.payment.user.email),
                ),
            )
            for r in receipts
        ],
    )


@router.get("/payments/{payment_id}/events", response_model=list[PaymentEventEntry])
def get_payment_events(payment_id: str, db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    """Full audit trail for one payment."""
    events = AuditService.get_trail(db, payment_id)
    if not events:
        raise HTTPException(status_code=404, detail="No events found for this payment")
    return events


@router.get("/payments/{payment_id}/events/verify")
def verify_payment_events(payment_id: str, db: Session = Depends(get_db), _admin: str = Depends(require_admin)):
    """Check the integrity of a payment's event hash chain."""
    if not db.query(PaymentEvent.id).filter(PaymentEvent.payment_id == payment_id).first():
        raise HTTPException(status_code=404, detail="No events found for this payment")
    return AuditService.verify_chain(db, payment_id)
