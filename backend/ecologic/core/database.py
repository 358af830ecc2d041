"""
Acesso ao Postgres gerenciado (Supabase).

Existem dois perfis de credencial, cada um com seu próprio engine e sessionmaker:

- ANON: papel sujeito às políticas RLS (operações do editor de orçamentos)
- SERVICE: papel de serviço, sem RLS (operações administrativas, duplicação)

Repositórios e serviços recebem a Session por parâmetro; nenhum módulo de
domínio importa uma sessão global.
"""
import enum
from typing import Dict, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from ecologic.core.config import settings

# Base única para todos os models
Base = declarative_base()


class DatabaseProfile(str, enum.Enum):
    ANON = "ANON"
    SERVICE = "SERVICE"


def _create_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


engines: Dict[DatabaseProfile, Engine] = {
    DatabaseProfile.ANON: _create_engine(settings.DATABASE_URL),
    DatabaseProfile.SERVICE: _create_engine(settings.service_database_url),
}

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engines[DatabaseProfile.ANON])
ServiceSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engines[DatabaseProfile.SERVICE])


def get_db() -> Iterator[Session]:
    """Dependency FastAPI: sessão com o perfil anônimo"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_service_db() -> Iterator[Session]:
    """Dependency FastAPI: sessão com o perfil de serviço (elevado)"""
    db = ServiceSessionLocal()
    try:
        yield db
    finally:
        db.close()
