from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # Perfil anônimo (sujeito às políticas RLS do Supabase)
    DATABASE_URL: str
    # Perfil elevado (service role). Se ausente, reutiliza DATABASE_URL
    DATABASE_SERVICE_URL: Optional[str] = None

    # Segredo usado pelo Supabase Auth para assinar os JWTs
    SUPABASE_JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"

    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True
    CORS_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def service_database_url(self) -> str:
        return self.DATABASE_SERVICE_URL or self.DATABASE_URL


settings = Settings()
