from pydantic import BaseModel
from typing import Optional, List, Dict, Any, Union
from datetime import date
from decimal import Decimal

from ecologic.models.selection import SelectedProduct
from ecologic.services.currency import format_currency
from ecologic.services.image_resolver import image_candidates, selected_color_snapshot
from ecologic.services.quote_mapper import QuoteView


class SelectionItem(BaseModel):
    """
    Item selecionado na busca do editor. Campos extras (dados do catálogo,
    `originalData`, etc.) são aceitos e repassados à consolidação.
    """
    id: Union[str, int]
    codigo: Optional[str] = None
    reference: Optional[str] = None
    name: Optional[str] = None
    color: Optional[str] = None
    selectedVariationImage: Optional[str] = None
    quantity: Optional[Union[float, str]] = None
    price: Optional[Union[Decimal, str]] = None
    quantity2: Optional[Union[float, str]] = None
    price2: Optional[Union[Decimal, str]] = None
    quantity3: Optional[Union[float, str]] = None
    price3: Optional[Union[Decimal, str]] = None

    class Config:
        extra = "allow"

    def to_product_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class SaveProductsRequest(BaseModel):
    products: List[SelectionItem] = []


class ConsolidateRequest(BaseModel):
    products: List[SelectionItem] = []


class StatusUpdateRequest(BaseModel):
    # Sem status informado, avança para o próximo passo
    status: Optional[str] = None


class TierResponse(BaseModel):
    quantity: int
    price: Decimal
    subtotal: Decimal
    price_formatted: str
    subtotal_formatted: str

    class Config:
        json_encoders = {
            Decimal: float
        }


class ConsolidatedProductResponse(BaseModel):
    id: str
    codigo: Optional[str] = None
    name: Optional[str] = None
    color: Optional[str] = None
    tiers: List[TierResponse]
    total_value: Decimal
    total_formatted: str
    image_url: str
    image_candidates: List[str]
    cor_selecionada: Optional[Dict[str, Any]] = None
    original_indexes: List[int]

    class Config:
        json_encoders = {
            Decimal: float
        }

    @classmethod
    def from_product(cls, product: SelectedProduct) -> "ConsolidatedProductResponse":
        tiers = []
        for number in (1, 2, 3):
            quantity, price = product.tier(number)
            subtotal = product.subtotal(number)
            tiers.append(TierResponse(
                quantity=quantity,
                price=price,
                subtotal=subtotal,
                price_formatted=format_currency(price),
                subtotal_formatted=format_currency(subtotal),
            ))
        candidates = image_candidates(product)
        return cls(
            id=product.id,
            codigo=product.codigo,
            name=product.name,
            color=product.color,
            tiers=tiers,
            total_value=product.total_value,
            total_formatted=format_currency(product.total_value),
            image_url=candidates[0],
            image_candidates=candidates,
            cor_selecionada=selected_color_snapshot(product),
            original_indexes=product.original_indexes,
        )


class ConsolidationResponse(BaseModel):
    products: List[ConsolidatedProductResponse]
    total: Decimal
    total_formatted: str

    class Config:
        json_encoders = {
            Decimal: float
        }


class QuoteLineResponse(BaseModel):
    id: int
    solicitacao_id: int
    products_id: Optional[str] = None
    products_quantidade_01: Optional[int] = None
    products_quantidade_02: Optional[int] = None
    products_quantidade_03: Optional[int] = None
    valor_qtd01: Optional[Decimal] = None
    valor_qtd02: Optional[Decimal] = None
    valor_qtd03: Optional[Decimal] = None
    color: Optional[str] = None
    customizations: Optional[str] = None
    gravacao: Optional[str] = None
    personalizacao: Optional[str] = None
    info: Optional[str] = None
    observacoes: Optional[str] = None
    custo: Optional[Decimal] = None
    preco_unitario: Optional[Decimal] = None
    valor_unitario: Optional[Decimal] = None
    fator: Optional[Decimal] = None
    cor_selecionada: Optional[str] = None
    imagem_variacao: Optional[str] = None
    img_ref_url: Optional[str] = None

    class Config:
        from_attributes = True
        json_encoders = {
            Decimal: float
        }


class QuoteResponse(BaseModel):
    id: int
    numero_orcamento: Optional[str] = None
    titulo: str
    cliente_id: Optional[str] = None
    consultor_id: Optional[int] = None
    status: str
    observacoes: Optional[str] = None
    valor_total: Decimal
    valor_total_formatted: str
    data_validade: date
    validade_proposta: str
    prazo_entrega: str
    forma_pagamento: str
    opcao_frete: str
    local_entrega: str
    local_cobranca: str
    is_copy: bool
    editable: bool

    class Config:
        json_encoders = {
            Decimal: float
        }

    @classmethod
    def from_view(cls, view: QuoteView) -> "QuoteResponse":
        return cls(
            id=view.id,
            numero_orcamento=view.numero_orcamento,
            titulo=view.titulo,
            cliente_id=view.cliente_id,
            consultor_id=view.consultor_id,
            status=view.status.value,
            observacoes=view.observacoes,
            valor_total=view.valor_total,
            valor_total_formatted=format_currency(view.valor_total),
            data_validade=view.data_validade,
            validade_proposta=view.validade_proposta,
            prazo_entrega=view.prazo_entrega,
            forma_pagamento=view.forma_pagamento,
            opcao_frete=view.opcao_frete,
            local_entrega=view.local_entrega,
            local_cobranca=view.local_cobranca,
            is_copy=view.is_copy,
            editable=view.editable,
        )


class DuplicateQuoteResponse(BaseModel):
    id: int
    original_id: int
    status: str
    observacoes: Optional[str] = None
