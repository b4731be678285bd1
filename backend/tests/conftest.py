"""
Shared fixtures: in-memory database, API client with overridden session,
admin token and small factories.
"""
import os
import tempfile

# Settings are read once at import; point them at throwaway locations first.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RAZORPAY_KEY_SECRET"] = ""
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="paydesk-uploads-")
os.environ["SMTP_HOST"] = ""
os.environ["SMTP_USER"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from paydesk.config import get_settings
from paydesk.database import Base, get_db, init_db
from paydesk.main import app
from paydesk.routes.payment import get_gateway
from paydesk.services.auth_service import AdminAuthService
from paydesk.services.gateway_service import GatewayService
from paydesk.utils.rate_limiter import reset_rate_limits

CUSTOMER = {
    "name": "John Doe",
    "email": "john@example.com",
    "phone": "9876543210",
    "address": "12 MG Road, Pune",
}


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def gateway():
    return GatewayService()


@pytest.fixture()
def client(engine, gateway):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: gateway
    reset_rate_limits()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        reset_rate_limits()


@pytest.fixture()
def settings():
    return get_settings()


@pytest.fixture()
def admin_headers():
    token, _ = AdminAuthService.issue_token(get_settings().ADMIN_USERNAME)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def paid_receipt(client, gateway):
    """Run a card payment end to end and return the verify response body."""
    init = client.post("/api/payment/initiate", json={**CUSTOMER, "amount": 1500, "paymentMode": "card"})
    assert init.status_code == 200
    body = init.json()
    verify = client.post("/api/payment/verify", json={
        "razorpayPaymentId": "pay_abc",
        "razorpayOrderId": body["orderId"],
        "razorpaySignature": gateway.sign(body["orderId"], "pay_abc"),
        "paymentId": body["paymentId"],
    })
    assert verify.status_code == 200
    return verify.json()
