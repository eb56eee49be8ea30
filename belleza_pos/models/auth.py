# belleza_pos/models/auth.py
# type: ignore

import uuid
from sqlalchemy import Column, String, Boolean, ForeignKey, TIMESTAMP, Enum, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
from belleza_pos.database import Base
from belleza_pos.models.enums import UserRole


class User(Base):
    __tablename__ = "user"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, nullable=True)

    # El rol es un enum cerrado, no una tabla
    role = Column(Enum(UserRole, native_enum=False, length=20), nullable=False)

    branch_id = Column(Uuid(as_uuid=True), ForeignKey("branch.id", ondelete="SET NULL"), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(TIMESTAMP, nullable=True)
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    branch = relationship("Branch", back_populates="users")
