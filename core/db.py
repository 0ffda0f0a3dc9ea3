from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Generator

class DatabaseSettings(BaseSettings):
    """Database configuration from environment"""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./content_ops.db"

# Initialize settings
db_settings = DatabaseSettings()

# SQLite connections are shared with the API threadpool
connect_args = {"check_same_thread": False} if db_settings.database_url.startswith("sqlite") else {}

engine = create_engine(
    db_settings.database_url,
    connect_args=connect_args,
    pool_pre_ping=True,
    pool_recycle=300
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()

def get_db() -> Generator[Session, None, None]:
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
