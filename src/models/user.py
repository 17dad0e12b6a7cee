"""User database model.

This module defines the User database model using SQLAlchemy.
"""

from sqlalchemy import Column, String
from .base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    user_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=True)  # only for provider 'local'
    role = Column(String, nullable=False, default="user")  # 'user' or 'admin'
    provider = Column(String, nullable=False, default="local")  # 'local' or 'github'
    github_id = Column(String, unique=True, index=True, nullable=True)
    avatar = Column(String, nullable=True)
    token_id = Column(String, unique=True, index=True, nullable=True)  # live session jti
    created_at = Column(String, nullable=False)  # ISO format string
    updated_at = Column(String, nullable=False)  # ISO format string
