from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from config import DATABASE_URL, SQLITE_BUSY_TIMEOUT

SQLITE_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def _serialize_sqlite_writers(engine):
    """
    pysqlite abre la transacción recién en el primer INSERT/UPDATE y SQLite
    ignora FOR UPDATE. Se toma el control del BEGIN para que cada
    transacción arranque con BEGIN IMMEDIATE y tome el lock de escritura
    antes de leer: el chequeo de disponibilidad o de saldo y la escritura
    quedan serializados entre conexiones.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str):
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    connect_args = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT}
    if url in SQLITE_MEMORY_URLS:
        # Una única conexión compartida (tests): no hay escritores concurrentes
        return create_engine(url, connect_args=connect_args, poolclass=StaticPool)

    engine = create_engine(url, connect_args=connect_args)
    _serialize_sqlite_writers(engine)
    return engine


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# create_all se hace desde main.py luego de importar los modelos


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
