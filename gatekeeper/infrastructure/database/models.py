"""
Database models for users, roles and access keys.
"""
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Uuid,
    func,
)
from sqlalchemy.orm import relationship

from gatekeeper.infrastructure.database.base import Base


class TimestampMixin:
    """Mixin for created_at and updated_at."""
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class RoleModel(Base, TimestampMixin):
    """Role with its permission set stored as a JSON list."""
    __tablename__ = "roles"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(String(500))
    permissions = Column(JSON, nullable=False, default=list)

    users = relationship("UserModel", back_populates="role")


class UserModel(Base):
    """User holding a single role reference."""
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, index=True)
    role_id = Column(Uuid(as_uuid=True), ForeignKey("roles.id"), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    role = relationship("RoleModel", back_populates="users")
    access_keys = relationship("AccessKeyModel", back_populates="owner", cascade="all, delete-orphan")


class AccessKeyModel(Base):
    """Issued access key. ``secret_hash`` holds a SHA-256 hex digest."""
    __tablename__ = "access_keys"

    access_key_id = Column(String(150), primary_key=True)
    secret_hash = Column(String(64), nullable=False)
    owner_user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    name = Column(String(100))
    created_at = Column(DateTime(timezone=True), nullable=False)
    max_age_days = Column(Integer, nullable=False, default=90)
    active = Column(Boolean, default=True, nullable=False)

    owner = relationship("UserModel", back_populates="access_keys")

    __table_args__ = (
        Index("idx_access_key_owner_active", "owner_user_id", "active"),
    )
