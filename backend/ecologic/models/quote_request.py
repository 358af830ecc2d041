from sqlalchemy import Column, Integer, String, Text, DateTime, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ecologic.core.database import Base


class QuoteRequest(Base):
    """
    Solicitação de orçamento (tabela externa `solicitacao_orcamentos`).
    O status é gravado com o rótulo em português usado pelo back-office.
    """
    __tablename__ = "solicitacao_orcamentos"

    solicitacao_id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user_id = Column(String(64), nullable=True, index=True)  # usuarios_clientes.id (uuid)
    consultor_id = Column(Integer, nullable=True, index=True)
    numero_solicitacao = Column(String(50), nullable=True)

    status = Column(String(50), nullable=True, default="Orçamento Solicitado")
    solicitacao_observacao = Column(Text, nullable=True)
    valor_total_estimado = Column(Numeric(10, 2), nullable=True)

    # Condições comerciais da proposta
    validade_proposta = Column(String(100), nullable=True)
    prazo_entrega = Column(String(100), nullable=True)
    forma_pagamento = Column(String(200), nullable=True)
    opcao_frete = Column(String(100), nullable=True)
    local_entrega = Column(Text, nullable=True)
    local_cobranca = Column(Text, nullable=True)

    lines = relationship("QuoteLine", back_populates="quote_request", cascade="all, delete-orphan")
