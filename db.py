import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./recommendations.db")

class Base(DeclarativeBase):
    pass

# SQLite connections are handed across worker threads by the behavior fetch
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, future=True, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_db(bind=None):
    """Create recommendation tables if they do not exist yet."""
    import recommendation.models  # noqa: F401  (registers tables on Base.metadata)
    Base.metadata.create_all(bind=bind or engine)
