from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from stockconv.core.config import settings

POOL_RECYCLE_SECONDS = 1800


class Base(DeclarativeBase):
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, *, sslmode: str = "prefer", echo: bool = False) -> Engine:
    """Create the ledger engine for ``url``.

    SQLite files are shared with test clients across threads and get foreign
    key enforcement switched on per connection; server databases get
    ``sslmode`` plus stale-connection recycling.
    """
    if url.startswith("sqlite"):
        built = create_engine(url, connect_args={"check_same_thread": False}, echo=echo)
        event.listen(built, "connect", _enable_sqlite_foreign_keys)
        return built
    return create_engine(
        url,
        connect_args={"sslmode": sslmode},
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=POOL_RECYCLE_SECONDS,
    )


engine = build_engine(settings.database_url, sslmode=settings.database_sslmode, echo=settings.sql_echo)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
