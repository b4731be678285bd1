from paydesk.models.user import User
from paydesk.models.payment import Payment
from paydesk.models.receipt import Receipt
from paydesk.models.audit import PaymentEvent
from paydesk.models.enums import PaymentStatus, PaymentMode

__all__ = ["User", "Payment", "Receipt", "PaymentEvent", "PaymentStatus", "PaymentMode"]
