"""
Mapeamento tolerante das linhas de `solicitacao_orcamentos` para a visão usada
pelo editor, com um valor padrão para cada campo opcional.
"""
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ecologic.models import QuoteRequest
from ecologic.services.currency import to_decimal
from ecologic.services.quote_status import QuoteStatus, is_copy, is_editable

logger = logging.getLogger(__name__)

DEFAULT_VALIDADE_PROPOSTA = "15 dias"
DEFAULT_PRAZO_ENTREGA = "15 / 20 dias úteis"
DEFAULT_OPCAO_FRETE = "frete-cif-incluso"
VALIDADE_DIAS = 30


@dataclass
class QuoteView:
    id: int
    numero_orcamento: Optional[str]
    titulo: str
    cliente_id: Optional[str]
    consultor_id: Optional[int]
    status: QuoteStatus
    observacoes: Optional[str]
    valor_total: Decimal
    data_validade: date
    validade_proposta: str
    prazo_entrega: str
    forma_pagamento: str
    opcao_frete: str
    local_entrega: str
    local_cobranca: str
    is_copy: bool
    editable: bool


def _get(row: Union[QuoteRequest, Dict[str, Any]], key: str) -> Any:
    if isinstance(row, dict):
        return row.get(key)
    return getattr(row, key, None)


def map_quote_request(
    row: Union[QuoteRequest, Dict[str, Any]],
    numero_orcamento: Optional[str] = None,
    today: Optional[date] = None,
) -> QuoteView:
    """Converte uma solicitação (ORM ou dict vindo do banco) em QuoteView"""
    today = today or date.today()
    observacao = _get(row, "solicitacao_observacao")
    status = _get(row, "status")

    return QuoteView(
        id=_get(row, "solicitacao_id"),
        numero_orcamento=numero_orcamento,
        titulo="Orçamento",
        cliente_id=_get(row, "user_id"),
        consultor_id=_get(row, "consultor_id"),
        status=QuoteStatus.parse(status),
        observacoes=observacao,
        valor_total=to_decimal(_get(row, "valor_total_estimado")),
        data_validade=today + timedelta(days=VALIDADE_DIAS),
        validade_proposta=_get(row, "validade_proposta") or DEFAULT_VALIDADE_PROPOSTA,
        prazo_entrega=_get(row, "prazo_entrega") or DEFAULT_PRAZO_ENTREGA,
        forma_pagamento=_get(row, "forma_pagamento") or "",
        opcao_frete=_get(row, "opcao_frete") or DEFAULT_OPCAO_FRETE,
        local_entrega=_get(row, "local_entrega") or "",
        local_cobranca=_get(row, "local_cobranca") or "",
        is_copy=is_copy(observacao),
        editable=is_editable(status, observacao),
    )


def fallback_quote_number(solicitacao_id: Any) -> str:
    return f"ORC-{str(solicitacao_id).zfill(4)}"


def generate_quote_number(db: Session, quote: QuoteRequest) -> str:
    """
    Número do orçamento: o número já gravado, senão a RPC
    `gerar_numero_orcamento()`, senão ORC-<id com 4 dígitos>.
    """
    if quote.numero_solicitacao:
        return quote.numero_solicitacao

    try:
        numero = db.execute(text("SELECT gerar_numero_orcamento()")).scalar()
        if numero:
            return str(numero)
    except SQLAlchemyError as e:
        # A transação abortada precisa ser descartada antes de novas queries
        db.rollback()
        logger.info(f"RPC gerar_numero_orcamento indisponível, usando número derivado do ID: {e}")

    return fallback_quote_number(quote.solicitacao_id)
