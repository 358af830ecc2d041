import os

# Configuração mínima antes de importar ecologic.core.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["JSON_LOGS"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ecologic.api import quotes
from ecologic.core.auth import get_current_consultor
from ecologic.core.database import Base, get_db, get_service_db
from ecologic.main import app
from ecologic.models import CatalogProduct, Consultor, QuoteRequest
from ecologic.services.quote_status import QuoteStatus


@pytest.fixture
def engine():
    # Banco novo a cada teste; StaticPool mantém a mesma conexão em memória
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def consultor(db):
    consultor = Consultor(
        auth_user_id="0b7c1d7e-auth-user",
        nome="Consultor Teste",
        email="consultor@example.com",
        role="consultor",
        ativo=True,
    )
    db.add(consultor)
    db.commit()
    db.refresh(consultor)
    return consultor


@pytest.fixture
def make_quote(db):
    def _make(**fields):
        values = {"status": QuoteStatus.SOLICITADO.value, "user_id": "cliente-1", **fields}
        quote = QuoteRequest(**values)
        db.add(quote)
        db.commit()
        db.refresh(quote)
        return quote
    return _make


@pytest.fixture
def catalog_product(db):
    product = CatalogProduct(
        codigo="CAN-001",
        titulo="Caneca Ecológica",
        img_0="https://cdn.example.com/caneca-0.jpg",
        img_1="https://cdn.example.com/caneca-1.jpg",
        img_2=None,
        variacoes=[
            {"cor": "Azul", "link_image": "https://cdn.example.com/caneca-azul.jpg", "codigo": "CAN-001-AZ"},
            {"cor": "Verde", "link_image": "https://cdn.example.com/caneca-verde.jpg", "codigo": "CAN-001-VD"},
        ],
    )
    db.add(product)
    db.commit()
    return product


@pytest.fixture
def anonymous_client(db):
    """Cliente HTTP com banco de teste, mas com a autenticação real"""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_service_db] = override_get_db
    quotes.limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def client(anonymous_client, consultor):
    app.dependency_overrides[get_current_consultor] = lambda: consultor
    return anonymous_client
