from sqlalchemy import Column, String, Text, JSON
from ecologic.core.database import Base


class CatalogProduct(Base):
    """Produto do catálogo (tabela externa `ecologic_products_site`, somente leitura)"""
    __tablename__ = "ecologic_products_site"

    codigo = Column(String(100), primary_key=True)
    titulo = Column(String(500), nullable=True)
    descricao = Column(Text, nullable=True)

    img_0 = Column(Text, nullable=True)
    img_1 = Column(Text, nullable=True)
    img_2 = Column(Text, nullable=True)

    # Lista de {cor, link_image|imagem, tamanho, preco, codigo}
    variacoes = Column(JSON, nullable=True)
