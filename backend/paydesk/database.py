"""
Database Engine & Session Management
SQLAlchemy setup with dependency injection for FastAPI.
"""
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from paydesk.config import get_settings

settings = get_settings()

if settings.DATABASE_URL.startswith("sqlite:///"):
    # Ensure data directory exists
    os.makedirs(os.path.dirname(settings.DATABASE_URL.replace("sqlite:///", "")) or ".", exist_ok=True)
    connect_args = {"check_same_thread": False}  # Required for SQLite
else:
    connect_args = {}

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=connect_args,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency: yields a database session, rolls back on error, auto-closes on finish."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables. Called once at application startup."""
    from paydesk.models import user as _user_model          # noqa: F401
    from paydesk.models import payment as _payment_model    # noqa: F401
    from paydesk.models import receipt as _receipt_model    # noqa: F401
    from paydesk.models import audit as _audit_model        # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
