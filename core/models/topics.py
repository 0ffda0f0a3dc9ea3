import uuid

from sqlalchemy import Column, String, Text, JSON
from sqlalchemy.dialects.postgresql import JSONB
from core.db import Base

class Topic(Base):
    """Named, colored topic tag"""
    __tablename__ = "topics"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(String(36), nullable=False)
    name = Column(Text, nullable=False)
    color = Column(String(32))
    keywords = Column(JSON().with_variant(JSONB(), "postgresql"), comment="Keywords as JSON array")
