from functools import lru_cache
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from storefront.core_settings import get_settings
from storefront.domain.models import Base

def build_engine(url: str, echo: bool = False) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo, future=True, pool_pre_ping=True)

    engine = create_engine(
        url,
        echo=echo,
        future=True,
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    # pysqlite defers BEGIN until the first write, which lets two checkouts read the
    # same stock level. Take the write lock up front so writers are serialised.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine

def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

@lru_cache
def get_engine() -> Engine:
    return build_engine(get_settings().database_url)

@lru_cache
def get_session_factory() -> sessionmaker:
    return build_session_factory(get_engine())

def init_models(engine: Engine = None):
    Base.metadata.create_all(engine or get_engine())
