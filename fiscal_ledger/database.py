"""
Ledger database connection setup
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from fiscal_ledger.config import settings

# SQLite needs check_same_thread=False; its busy timeout bounds lock waits
engine_kwargs = {}
connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {
        "check_same_thread": False,
        "timeout": settings.LEDGER_DB_TIMEOUT_SECONDS,
    }
else:
    engine_kwargs["pool_timeout"] = settings.LEDGER_DB_TIMEOUT_SECONDS

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=connect_args,
    echo=settings.DEBUG,
    **engine_kwargs,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Database session dependency"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
