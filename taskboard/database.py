from datetime import datetime, UTC
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from taskboard.config import DATABASE_URL

# Only apply sqlite-specific connect_args when using sqlite
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Enable pool_pre_ping to avoid stale connections (useful for cloud DBs like Neon)
engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True,
)

if DATABASE_URL.startswith("sqlite"):
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db() -> None:
    # register every mapped class on Base.metadata before creating tables
    from taskboard.models import user, workspace, project, task, comment  # noqa: F401
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def utcnow():
    # naive UTC: SQLite drops tzinfo on the way back out
    return datetime.now(UTC).replace(tzinfo=None)
