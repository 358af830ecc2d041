"""
Operações do editor de orçamentos sobre uma solicitação: leitura, gravação
dos produtos consolidados, duplicação e mudança de status.
"""
import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ecologic.models import QuoteLine, QuoteRequest, CatalogProduct
from ecologic.models.selection import SelectedProduct, parse_variations, to_price
from ecologic.services.consolidation import Selection, consolidate_products, quote_total
from ecologic.services.quote_lines import (
    QuoteLineRepository,
    QuoteLinesPersistenceError,
    save_quote_lines,
)
from ecologic.services.quote_mapper import QuoteView, generate_quote_number, map_quote_request
from ecologic.services.quote_status import (
    COPY_MARKER,
    QuoteStatus,
    advance,
    ensure_editable,
    transition,
)

logger = logging.getLogger(__name__)

# Colunas copiadas na duplicação de uma linha de produto
_LINE_COLUMNS = (
    "products_id",
    "products_quantidade_01", "products_quantidade_02", "products_quantidade_03",
    "valor_qtd01", "valor_qtd02", "valor_qtd03",
    "color", "customizations", "gravacao", "personalizacao", "info", "observacoes",
    "custo", "preco_unitario", "valor_unitario", "fator",
    "cor_selecionada", "imagem_variacao", "img_ref_url",
)

_REQUEST_COLUMNS = (
    "user_id", "consultor_id", "status", "valor_total_estimado",
    "validade_proposta", "prazo_entrega", "forma_pagamento", "opcao_frete",
    "local_entrega", "local_cobranca",
)


class QuoteNotFoundError(Exception):
    def __init__(self, solicitacao_id: int):
        self.solicitacao_id = solicitacao_id
        super().__init__(f"Orçamento {solicitacao_id} não encontrado")


def copy_observation(solicitacao_id: int, observacao: Optional[str]) -> str:
    return f"{COPY_MARKER} #{solicitacao_id} - {observacao or ''}"


def _parse_snapshot(value: Optional[str]) -> Optional[Dict[str, Any]]:
    if not value:
        return None
    try:
        snapshot = json.loads(value)
    except ValueError:
        # Linhas antigas gravam só o nome da cor
        return None
    return snapshot if isinstance(snapshot, dict) else None


def selection_from_line(line: QuoteLine, catalog: Optional[CatalogProduct] = None) -> SelectedProduct:
    """Reconstrói o produto editável a partir de uma linha gravada"""
    snapshot = _parse_snapshot(line.cor_selecionada)
    product = SelectedProduct(
        id=line.products_id or str(line.id),
        codigo=line.products_id,
        color=line.color,
        selected_variation_image=line.imagem_variacao,
        cor_selecionada=snapshot,
        quantity1=line.products_quantidade_01 or 0,
        price1=to_price(line.valor_qtd01),
        quantity2=line.products_quantidade_02 or 0,
        price2=to_price(line.valor_qtd02),
        quantity3=line.products_quantidade_03 or 0,
        price3=to_price(line.valor_qtd03),
        personalizacao=line.personalizacao,
        gravacao=line.gravacao,
        observations=line.customizations,
        observacoes=line.observacoes,
        info=line.info,
        custo=line.custo,
        preco_unitario=line.preco_unitario,
        valor_unitario=line.valor_unitario,
        fator=line.fator,
    )
    if catalog is not None:
        product = product.copy(
            name=catalog.titulo,
            img_0=catalog.img_0,
            img_1=catalog.img_1,
            img_2=catalog.img_2,
            variations=parse_variations(catalog.variacoes),
        )
    elif line.img_ref_url:
        product = product.copy(img_0=line.img_ref_url)
    return product


class QuoteService:
    def __init__(self, db: Session):
        self.db = db
        self.lines = QuoteLineRepository(db)

    def _get_request(self, solicitacao_id: int) -> QuoteRequest:
        quote = (
            self.db.query(QuoteRequest)
            .filter(QuoteRequest.solicitacao_id == solicitacao_id)
            .first()
        )
        if not quote:
            raise QuoteNotFoundError(solicitacao_id)
        return quote

    def get_quote(self, solicitacao_id: int) -> QuoteView:
        quote = self._get_request(solicitacao_id)
        numero = generate_quote_number(self.db, quote)
        return map_quote_request(quote, numero_orcamento=numero)

    def list_lines(self, solicitacao_id: int) -> List[QuoteLine]:
        self._get_request(solicitacao_id)
        return self.lines.list_lines(solicitacao_id)

    def load_selections(self, solicitacao_id: int) -> List[SelectedProduct]:
        """Linhas gravadas como produtos editáveis, enriquecidas com o catálogo"""
        lines = self.list_lines(solicitacao_id)
        codes = {line.products_id for line in lines if line.products_id}
        catalog = {}
        if codes:
            products = self.db.query(CatalogProduct).filter(CatalogProduct.codigo.in_(codes)).all()
            catalog = {product.codigo: product for product in products}
        return [selection_from_line(line, catalog.get(line.products_id)) for line in lines]

    def save_products(self, solicitacao_id: int, selections: Iterable[Selection]) -> List[SelectedProduct]:
        """
        Consolida as seleções e substitui as linhas gravadas do orçamento.

        Raises:
            QuoteNotFoundError: solicitação inexistente
            QuoteReadOnlyError: orçamento já gerado (e não é cópia)
            QuoteLinesPersistenceError: falha de banco; nada foi alterado
        """
        quote = self._get_request(solicitacao_id)
        ensure_editable(solicitacao_id, quote.status, quote.solicitacao_observacao)

        rows = consolidate_products(selections)
        save_quote_lines(self.db, solicitacao_id, rows, valor_total=quote_total(rows))
        logger.info(f"Orçamento {solicitacao_id} salvo com {len(rows)} produtos")
        return rows

    def duplicate(self, solicitacao_id: int) -> QuoteRequest:
        """
        Cria uma cópia da solicitação e das suas linhas em uma única transação.

        A cópia mantém o status da original e é marcada na observação, o que
        a torna editável mesmo depois de gerada.
        """
        original = self._get_request(solicitacao_id)
        try:
            copy = QuoteRequest(
                **{column: getattr(original, column) for column in _REQUEST_COLUMNS},
                solicitacao_observacao=copy_observation(solicitacao_id, original.solicitacao_observacao),
            )
            self.db.add(copy)
            self.db.flush()

            lines = self.lines.list_lines(solicitacao_id)
            self.lines.insert_lines(
                dict({column: getattr(line, column) for column in _LINE_COLUMNS}, solicitacao_id=copy.solicitacao_id)
                for line in lines
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Erro ao duplicar orçamento {solicitacao_id}: {e}")
            raise QuoteLinesPersistenceError(solicitacao_id, e) from e

        self.db.refresh(copy)
        logger.info(f"Orçamento {solicitacao_id} duplicado como {copy.solicitacao_id} ({len(lines)} linhas)")
        return copy

    def _set_status(self, quote: QuoteRequest, status: QuoteStatus) -> QuoteView:
        previous = quote.status
        quote.status = status.value
        self.db.commit()
        self.db.refresh(quote)
        logger.info(f"Orçamento {quote.solicitacao_id}: status '{previous}' -> '{status.value}'")
        return map_quote_request(quote, numero_orcamento=generate_quote_number(self.db, quote))

    def change_status(self, solicitacao_id: int, target: QuoteStatus) -> QuoteView:
        quote = self._get_request(solicitacao_id)
        return self._set_status(quote, transition(quote.status, target))

    def advance_status(self, solicitacao_id: int) -> QuoteView:
        quote = self._get_request(solicitacao_id)
        return self._set_status(quote, advance(quote.status))
