"""
Database engine, session factory and the per-request get_db dependency.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from lacr.core.config import settings

# ---------------------------------------------------------------------------
# DATABASE ENGINE
# ---------------------------------------------------------------------------
# - pool_pre_ping=True: test pooled connections before use so a restarted
#   database does not surface as a 500 on the next request
# - SQLite (local runs, tests) needs check_same_thread=False because FastAPI
#   runs sync endpoints in a threadpool
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)

# ---------------------------------------------------------------------------
# SESSION FACTORY
# ---------------------------------------------------------------------------
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    FastAPI dependency that provides one database session per request.

    Usage in a route:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            ...

    The session is always closed after the response, even if the route raised.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
