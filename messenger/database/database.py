from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from messenger.core.config import settings

DATABASE_URL = settings.DATABASE_URL
if not DATABASE_URL:
    raise ValueError("DATABASE_URL is not set in .env")

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # requests are served from a thread pool
    connect_args["check_same_thread"] = False

engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    echo=settings.DEBUG,
    future=True,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

Base = declarative_base()


def get_db():
    """
    Opens a DB session for each request.
    Closes it when the request is done.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables known to the models (development / tests)."""
    import messenger.models  # noqa: F401  registers every table on Base

    Base.metadata.create_all(bind=bind or engine)
