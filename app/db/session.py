from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session
from app.core.config import settings

def build_engine(url: str) -> Engine:
    # check_same_thread is needed for SQLite, remove for PostgreSQL
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": settings.DB_LOCK_TIMEOUT}
    return create_engine(url, connect_args=connect_args)

engine = build_engine(settings.DATABASE_URL)

def get_session():
    with Session(engine) as session:
        yield session

def create_db_and_tables(bind: Engine = None):
    SQLModel.metadata.create_all(bind or engine)

def begin_write_transaction(session: Session):
    """Open the session's transaction holding the database write lock.

    SQLite ignores ``FOR UPDATE``, so the transaction is started with
    ``BEGIN IMMEDIATE`` instead; concurrent writers then queue on the lock
    for up to ``DB_LOCK_TIMEOUT`` seconds. Other backends rely on the row
    locks taken by ``with_for_update()`` reads.
    """
    connection = session.connection()
    if connection.dialect.name != "sqlite":
        return
    if not connection.connection.dbapi_connection.in_transaction:
        connection.exec_driver_sql("BEGIN IMMEDIATE")
