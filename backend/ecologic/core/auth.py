"""
Autenticação via JWT emitido pelo Supabase Auth
"""
import logging
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from ecologic.core.database import get_db
from ecologic.core.config import settings
from ecologic.core.logging import log_security_event
from ecologic.models.consultor import Consultor

logger = logging.getLogger(__name__)

# Audiência padrão dos tokens de usuários logados no Supabase
SUPABASE_AUDIENCE = "authenticated"

security = HTTPBearer()


def decode_access_token(token: str) -> dict:
    """Decodifica e valida um token JWT do Supabase"""
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=SUPABASE_AUDIENCE,
        )
    except JWTError as e:
        log_security_event(logger, "invalid_token", details={"error": str(e)}, severity="WARNING")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido ou expirado",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_consultor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> Consultor:
    """Obtém o consultor vinculado ao usuário do token"""
    payload = decode_access_token(credentials.credentials)

    auth_user_id: Optional[str] = payload.get("sub")
    if not auth_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido",
            headers={"WWW-Authenticate": "Bearer"},
        )

    consultor = db.query(Consultor).filter(Consultor.auth_user_id == auth_user_id).first()
    if consultor is None:
        log_security_event(logger, "unknown_consultor", user_id=auth_user_id, severity="WARNING")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Consultor não encontrado"
        )

    if not consultor.ativo:
        log_security_event(logger, "inactive_consultor", user_id=auth_user_id, severity="WARNING")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Consultor inativo"
        )

    return consultor

