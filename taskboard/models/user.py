from uuid import uuid4
from sqlalchemy import Column, String, DateTime
from taskboard.database import Base, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    email = Column(String, unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)  # bcrypt hash, never the plaintext
    name = Column(String, nullable=True)
    reset_token = Column(String, unique=True, nullable=True)
    reset_token_expiry = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
