"""
Gravação das linhas de produtos de um orçamento (tabela `products_solicitacao`).

A gravação substitui todas as linhas anteriores do orçamento: apaga e insere
dentro da mesma transação. Se a inserção falhar, a transação inteira é
desfeita e as linhas anteriores continuam visíveis.
"""
import json
import logging
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ecologic.core.logging import log_quote_lines_write
from ecologic.models import QuoteLine, QuoteRequest
from ecologic.models.selection import SelectedProduct
from ecologic.services.currency import to_decimal
from ecologic.services.decimal_validation import validate_decimal_value
from ecologic.services.image_resolver import (
    PLACEHOLDER_IMAGE,
    resolve_variation_image,
    selected_color_snapshot,
    variation_image,
)

logger = logging.getLogger(__name__)


class QuoteLinesPersistenceError(Exception):
    """Falha de banco ao substituir as linhas; nenhuma alteração foi aplicada"""

    def __init__(self, solicitacao_id: int, cause: Exception):
        self.solicitacao_id = solicitacao_id
        self.cause = cause
        super().__init__(f"Erro ao salvar os produtos do orçamento {solicitacao_id}: {cause}")


def resolve_products_key(product: SelectedProduct) -> Optional[str]:
    """Chave do produto no catálogo: codigo, depois reference, depois id"""
    for value in (product.codigo, product.reference, product.id):
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _factor(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    number = to_decimal(value)
    if number == 0:
        return None
    return number.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)


def build_line_row(solicitacao_id: int, product: SelectedProduct) -> Dict[str, Any]:
    """
    Monta a linha persistida de um produto consolidado.

    Todos os campos monetários passam por validate_decimal_value. O snapshot
    da variação vai em `cor_selecionada` como JSON; sem variação casada, vai
    apenas o nome da cor.
    """
    position = product.original_indexes[0] + 1 if product.original_indexes else product.id
    snapshot = selected_color_snapshot(product)
    image = resolve_variation_image(product)

    return {
        "solicitacao_id": solicitacao_id,
        "products_id": resolve_products_key(product),
        "products_quantidade_01": product.quantity1 or 0,
        "products_quantidade_02": product.quantity2 or 0,
        "products_quantidade_03": product.quantity3 or 0,
        "color": product.color or None,
        "customizations": product.observations or None,
        "gravacao": product.gravacao or None,
        "personalizacao": product.personalizacao or None,
        "info": product.info or None,
        "custo": validate_decimal_value(product.custo, f"custo do produto {position}"),
        "preco_unitario": validate_decimal_value(product.preco_unitario, f"preco_unitario do produto {position}"),
        "valor_unitario": validate_decimal_value(product.valor_unitario, f"valor_unitario do produto {position}"),
        "observacoes": product.observacoes or None,
        "fator": _factor(product.fator),
        "valor_qtd01": validate_decimal_value(product.price1, f"valor_qtd01 do produto {position}"),
        "valor_qtd02": validate_decimal_value(product.price2, f"valor_qtd02 do produto {position}"),
        "valor_qtd03": validate_decimal_value(product.price3, f"valor_qtd03 do produto {position}"),
        "cor_selecionada": json.dumps(snapshot, ensure_ascii=False) if snapshot else (product.color or None),
        "imagem_variacao": variation_image(product),
        "img_ref_url": image if image != PLACEHOLDER_IMAGE else None,
    }


class QuoteLineRepository:
    """Acesso às linhas de um orçamento. Não faz commit: a transação é do chamador."""

    def __init__(self, db: Session):
        self.db = db

    def list_lines(self, solicitacao_id: int) -> List[QuoteLine]:
        return (
            self.db.query(QuoteLine)
            .filter(QuoteLine.solicitacao_id == solicitacao_id)
            .order_by(QuoteLine.id)
            .all()
        )

    def count_lines(self, solicitacao_id: int) -> int:
        return self.db.query(QuoteLine).filter(QuoteLine.solicitacao_id == solicitacao_id).count()

    def delete_lines(self, solicitacao_id: int) -> int:
        return (
            self.db.query(QuoteLine)
            .filter(QuoteLine.solicitacao_id == solicitacao_id)
            .delete(synchronize_session="evaluate")
        )

    def insert_lines(self, rows: Iterable[Dict[str, Any]]) -> List[QuoteLine]:
        lines = [QuoteLine(**row) for row in rows]
        self.db.add_all(lines)
        self.db.flush()
        return lines

    def replace_lines(self, solicitacao_id: int, products: Iterable[SelectedProduct]) -> List[QuoteLine]:
        """
        Apaga as linhas anteriores e insere uma linha por produto consolidado.

        As linhas são montadas antes de tocar no banco, então um produto com
        dados ruins nunca deixa a transação pela metade. O commit (ou rollback)
        fica com o chamador; veja save_quote_lines.
        """
        rows = [build_line_row(solicitacao_id, product) for product in products]
        deleted = self.delete_lines(solicitacao_id)
        lines = self.insert_lines(rows)
        logger.debug(f"Orçamento {solicitacao_id}: {deleted} linhas removidas, {len(lines)} preparadas")
        return lines


def save_quote_lines(
    db: Session,
    solicitacao_id: int,
    products: List[SelectedProduct],
    valor_total: Optional[Decimal] = None,
) -> List[QuoteLine]:
    """
    Substitui as linhas do orçamento em uma única transação.

    Se `valor_total` for informado, o total estimado do orçamento é
    atualizado na mesma transação.

    Raises:
        QuoteLinesPersistenceError: erro de banco; a transação foi desfeita e
            as linhas anteriores permanecem. `products` não é alterado, então o
            chamador pode tentar novamente com o mesmo estado.
    """
    repository = QuoteLineRepository(db)
    start = time.time()
    try:
        previous = repository.count_lines(solicitacao_id)
        lines = repository.replace_lines(solicitacao_id, products)
        if valor_total is not None:
            db.query(QuoteRequest).filter(QuoteRequest.solicitacao_id == solicitacao_id).update(
                {"valor_total_estimado": validate_decimal_value(valor_total, "valor_total_estimado")},
                synchronize_session=False,
            )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log_quote_lines_write(
            logger, solicitacao_id, rows_deleted=0, rows_inserted=0,
            duration_ms=round((time.time() - start) * 1000, 2), error=str(e)
        )
        raise QuoteLinesPersistenceError(solicitacao_id, e) from e

    log_quote_lines_write(
        logger, solicitacao_id, rows_deleted=previous, rows_inserted=len(lines),
        duration_ms=round((time.time() - start) * 1000, 2)
    )
    return lines
