from paydesk.routes.payment import router as payment_router
from paydesk.routes.receipt import router as receipt_router
from paydesk.routes.admin import router as admin_router

__all__ = ["payment_router", "receipt_router", "admin_router"]
