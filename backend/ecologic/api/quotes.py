from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from typing import List
from slowapi import Limiter
from slowapi.util import get_remote_address
from ecologic.core.database import get_db, get_service_db
from ecologic.core.auth import get_current_consultor
from ecologic.models import Consultor
from ecologic.api.schemas import (
    ConsolidateRequest,
    ConsolidatedProductResponse,
    ConsolidationResponse,
    DuplicateQuoteResponse,
    QuoteLineResponse,
    QuoteResponse,
    SaveProductsRequest,
    StatusUpdateRequest,
)
from ecologic.services.consolidation import consolidate_products, quote_total
from ecologic.services.currency import format_currency
from ecologic.services.quote_lines import QuoteLinesPersistenceError
from ecologic.services.quote_service import QuoteNotFoundError, QuoteService
from ecologic.services.quote_status import InvalidStatusTransition, QuoteReadOnlyError, QuoteStatus
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quotes", tags=["quotes"])

# Configurar limiter para gravação de produtos
limiter = Limiter(key_func=get_remote_address)


def _consolidation_response(rows) -> ConsolidationResponse:
    total = quote_total(rows)
    return ConsolidationResponse(
        products=[ConsolidatedProductResponse.from_product(row) for row in rows],
        total=total,
        total_formatted=format_currency(total),
    )


@router.post("/consolidate", response_model=ConsolidationResponse)
def preview_consolidation(
    payload: ConsolidateRequest,
    current_consultor: Consultor = Depends(get_current_consultor)
):
    """Consolida a seleção sem gravar (pré-visualização do editor)"""
    rows = consolidate_products(item.to_product_dict() for item in payload.products)
    return _consolidation_response(rows)


@router.get("/{quote_id}", response_model=QuoteResponse)
def get_quote(
    quote_id: int,
    current_consultor: Consultor = Depends(get_current_consultor),
    db: Session = Depends(get_db)
):
    try:
        view = QuoteService(db).get_quote(quote_id)
    except QuoteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return QuoteResponse.from_view(view)


@router.get("/{quote_id}/products", response_model=List[QuoteLineResponse])
def list_quote_products(
    quote_id: int,
    current_consultor: Consultor = Depends(get_current_consultor),
    db: Session = Depends(get_db)
):
    try:
        return QuoteService(db).list_lines(quote_id)
    except QuoteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{quote_id}/selections", response_model=ConsolidationResponse)
def load_quote_selections(
    quote_id: int,
    current_consultor: Consultor = Depends(get_current_consultor),
    db: Session = Depends(get_db)
):
    """Linhas gravadas no formato editável, com imagens resolvidas pelo catálogo"""
    try:
        rows = QuoteService(db).load_selections(quote_id)
    except QuoteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _consolidation_response(rows)


@router.put("/{quote_id}/products", response_model=ConsolidationResponse)
@limiter.limit("30/minute")
def save_quote_products(
    request: Request,
    quote_id: int,
    payload: SaveProductsRequest,
    current_consultor: Consultor = Depends(get_current_consultor),
    db: Session = Depends(get_db)
):
    try:
        rows = QuoteService(db).save_products(
            quote_id, [item.to_product_dict() for item in payload.products]
        )
    except QuoteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except QuoteReadOnlyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except QuoteLinesPersistenceError as e:
        logger.error(f"Falha ao gravar produtos do orçamento {quote_id}: {e.cause}")
        raise HTTPException(
            status_code=503,
            detail="Não foi possível salvar os produtos. Nenhuma alteração foi aplicada; tente novamente."
        )

    return _consolidation_response(rows)


@router.post("/{quote_id}/duplicate", response_model=DuplicateQuoteResponse)
def duplicate_quote(
    quote_id: int,
    current_consultor: Consultor = Depends(get_current_consultor),
    db: Session = Depends(get_service_db)
):
    try:
        copy = QuoteService(db).duplicate(quote_id)
    except QuoteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except QuoteLinesPersistenceError:
        raise HTTPException(status_code=503, detail="Não foi possível duplicar o orçamento")

    return DuplicateQuoteResponse(
        id=copy.solicitacao_id,
        original_id=quote_id,
        status=QuoteStatus.parse(copy.status).value,
        observacoes=copy.solicitacao_observacao,
    )


@router.put("/{quote_id}/status", response_model=QuoteResponse)
def update_quote_status(
    quote_id: int,
    payload: StatusUpdateRequest,
    current_consultor: Consultor = Depends(get_current_consultor),
    db: Session = Depends(get_db)
):
    service = QuoteService(db)
    try:
        if payload.status:
            target = QuoteStatus.from_label(payload.status)
            if target is None:
                raise HTTPException(status_code=422, detail=f"Status desconhecido: {payload.status}")
            view = service.change_status(quote_id, target)
        else:
            view = service.advance_status(quote_id)
    except QuoteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))

    return QuoteResponse.from_view(view)
