from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from ecologic.core.database import Base


class QuoteLine(Base):
    """
    Linha de produto consolidado de um orçamento (tabela externa `products_solicitacao`).
    Os nomes das colunas são lidos pelos relatórios/impressão e não podem mudar.
    """
    __tablename__ = "products_solicitacao"

    id = Column(Integer, primary_key=True, index=True)
    solicitacao_id = Column(
        Integer, ForeignKey("solicitacao_orcamentos.solicitacao_id", ondelete="CASCADE"),
        nullable=False, index=True
    )
    products_id = Column(String(100), nullable=True)  # ecologic_products_site.codigo

    # Três faixas de quantidade/preço lado a lado
    products_quantidade_01 = Column(Integer, default=0)
    products_quantidade_02 = Column(Integer, default=0)
    products_quantidade_03 = Column(Integer, default=0)
    valor_qtd01 = Column(Numeric(10, 2), nullable=True)
    valor_qtd02 = Column(Numeric(10, 2), nullable=True)
    valor_qtd03 = Column(Numeric(10, 2), nullable=True)

    color = Column(String(100), nullable=True)
    customizations = Column(Text, nullable=True)
    gravacao = Column(Text, nullable=True)
    personalizacao = Column(Text, nullable=True)
    info = Column(Text, nullable=True)
    observacoes = Column(Text, nullable=True)

    custo = Column(Numeric(10, 2), nullable=True)
    preco_unitario = Column(Numeric(10, 2), nullable=True)
    valor_unitario = Column(Numeric(10, 2), nullable=True)
    fator = Column(Numeric(10, 4), nullable=True)

    # Snapshot da variação escolhida: JSON serializado ou apenas o nome da cor
    cor_selecionada = Column(Text, nullable=True)
    imagem_variacao = Column(Text, nullable=True)
    img_ref_url = Column(Text, nullable=True)

    quote_request = relationship("QuoteRequest", back_populates="lines")
