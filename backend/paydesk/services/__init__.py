from paydesk.services.audit_service import AuditService
from paydesk.services.gateway_service import GatewayService
from paydesk.services.receipt_service import ReceiptService
from paydesk.services.payment_service import PaymentService
from paydesk.services.pdf_service import PdfService, ReceiptDocument
from paydesk.services.email_service import EmailService
from paydesk.services.auth_service import AdminAuthService

__all__ = [
    "AuditService", "GatewayService", "ReceiptService", "PaymentService",
    "PdfService", "ReceiptDocument", "EmailService", "AdminAuthService",
]
