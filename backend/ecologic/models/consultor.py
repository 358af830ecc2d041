from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
import enum
from ecologic.core.database import Base


class ConsultorRole(str, enum.Enum):
    ADMIN = "admin"
    CONSULTOR = "consultor"


class Consultor(Base):
    """Consultor/administrador vinculado a um usuário do Supabase Auth"""
    __tablename__ = "consultores"

    id = Column(Integer, primary_key=True, index=True)
    auth_user_id = Column(String(64), unique=True, index=True, nullable=True)
    nome = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(String(20), default=ConsultorRole.CONSULTOR.value, nullable=False)
    ativo = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
