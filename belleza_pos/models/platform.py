# belleza_pos/models/platform.py
# type: ignore

from sqlalchemy import Column, String, Boolean, TIMESTAMP, Uuid
from sqlalchemy.orm import relationship
from belleza_pos.database import Base
from datetime import datetime
from uuid import uuid4


# ***************************************************************
# Branch (Sucursal o Punto de Venta Físico)
# ***************************************************************
class Branch(Base):
    """
    Representa una sucursal física del negocio.
    Los usuarios (vendedores, cajeros) pueden estar asignados a una sucursal.
    """
    __tablename__ = "branch"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(100), unique=True, nullable=False)
    address = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    email = Column(String(100), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Sin cascada: una sucursal con usuarios no se puede borrar físicamente
    users = relationship("User", back_populates="branch")
