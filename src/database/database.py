from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from src.config import settings

Base = declarative_base()


def make_engine(url: str) -> Engine:
    # Store calls run on worker threads, so sqlite connections must be shareable.
    return create_engine(url, connect_args={"check_same_thread": False} if "sqlite" in url else {})


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


DATABASE_URL = settings.database_url

engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)
