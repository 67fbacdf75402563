#Description: SQLAlchemy engine/session factory and DB initializer.
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, scoped_session

def create_db_engine(url: str):
    is_sqlite = url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    engine = create_engine(url, echo=False, future=True, pool_pre_ping=True, connect_args=connect_args)
    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _record):
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA journal_mode=WAL")
            cur.execute("PRAGMA foreign_keys=ON")
            cur.close()
    return engine

def make_session_factory(engine):
    return scoped_session(sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False))

def init_db(engine):
    from models.orm import Base
    Base.metadata.create_all(bind=engine)
