"""
Estruturas em memória do editor de orçamentos.

SelectedProduct representa um produto escolhido na busca e editado pelo
consultor; não é persistido diretamente (ver services/quote_lines.py).
"""
import json
import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ecologic.services.currency import to_decimal

logger = logging.getLogger(__name__)


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# Colunas products_quantidade_0N são INTEGER
MAX_QUANTITY = 2147483647


def to_quantity(value: Any) -> int:
    """Quantidade inteira não negativa; valor inválido vira 0"""
    number = to_decimal(value)
    if number <= 0:
        return 0
    if number > MAX_QUANTITY:
        logger.warning("Quantidade %s acima do limite; usando %s", value, MAX_QUANTITY)
        return MAX_QUANTITY
    return int(number)


def to_price(value: Any) -> Decimal:
    """Preço unitário não negativo; valor inválido vira 0"""
    number = to_decimal(value)
    return number if number > 0 else Decimal("0")


def _first_present(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return None


@dataclass(frozen=True)
class Variation:
    """Variação de catálogo (cor/tamanho), possivelmente com imagem própria"""
    color: str
    image_url: Optional[str] = None
    name: Optional[str] = None
    code: Optional[str] = None
    size: Optional[str] = None
    price: Optional[Decimal] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["Variation"]:
        """Aceita as chaves do JSON `variacoes` do catálogo (cor, link_image, imagem...)"""
        if not isinstance(data, dict):
            return None
        color = _text(_first_present(data, "cor", "color", "nome", "name"))
        if not color:
            return None
        price = _first_present(data, "preco", "price")
        return cls(
            color=color,
            image_url=_text(_first_present(data, "link_image", "imagem", "image", "image_url")),
            name=_text(_first_present(data, "nome", "name")),
            code=_text(_first_present(data, "codigo", "code")),
            size=_text(_first_present(data, "tamanho", "size")),
            price=to_price(price) if price is not None else None,
        )


def parse_variations(raw: Any) -> List[Variation]:
    """Lê `variacoes` em lista ou string JSON; JSON inválido resulta em lista vazia"""
    if isinstance(raw, (list, tuple)) and all(isinstance(v, Variation) for v in raw):
        return list(raw)
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.debug("variacoes com JSON inválido ignorado")
            return []
    if not isinstance(raw, (list, tuple)):
        return []

    variations = []
    for item in raw:
        if isinstance(item, Variation):
            variations.append(item)
            continue
        variation = Variation.from_dict(item)
        if variation:
            variations.append(variation)
    return variations


@dataclass
class SelectedProduct:
    """Produto selecionado para o orçamento, com três faixas de quantidade/preço"""
    id: str
    codigo: Optional[str] = None
    reference: Optional[str] = None
    name: Optional[str] = None

    # Variação
    color: Optional[str] = None
    variations: List[Variation] = field(default_factory=list)
    selected_variation_image: Optional[str] = None
    cor_selecionada: Optional[Dict[str, Any]] = None

    # Imagens genéricas do catálogo
    img_0: Optional[str] = None
    img_1: Optional[str] = None
    img_2: Optional[str] = None

    # Faixas
    quantity1: int = 0
    price1: Decimal = Decimal("0")
    quantity2: int = 0
    price2: Decimal = Decimal("0")
    quantity3: int = 0
    price3: Decimal = Decimal("0")

    # Texto livre copiado para a linha persistida
    personalizacao: Optional[str] = None
    gravacao: Optional[str] = None
    observations: Optional[str] = None
    observacoes: Optional[str] = None
    info: Optional[str] = None

    # Campos de custo, validados somente na escrita
    custo: Any = None
    preco_unitario: Any = None
    valor_unitario: Any = None
    fator: Any = None

    # Posições na lista original que formaram esta linha consolidada
    original_indexes: List[int] = field(default_factory=list)
    # Faixa -> posição do item de origem que a preencheu
    tier_sources: Dict[int, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SelectedProduct":
        """
        Mapeamento tolerante de um item de seleção (ou linha do catálogo) para
        SelectedProduct. A faixa 1 vem de `quantity`/`price` (ou `quantity1`/`preco1`);
        as faixas 2 e 3 aceitam `price2`/`preco2` e `price3`/`preco3`.
        """
        catalog = data.get("originalData") or {}
        if isinstance(catalog, dict) and isinstance(catalog.get("ecologic_products_site"), dict):
            catalog = catalog["ecologic_products_site"]

        def pick(*keys: str) -> Any:
            value = _first_present(data, *keys)
            if value is None and isinstance(catalog, dict):
                value = _first_present(catalog, *keys)
            return value

        return cls(
            id=str(_first_present(data, "id", "codigo") or ""),
            codigo=_text(pick("codigo")),
            reference=_text(pick("reference", "referencia")),
            name=_text(pick("name", "titulo")),
            color=_text(data.get("color")),
            variations=parse_variations(pick("variations", "variacoes")),
            selected_variation_image=_text(data.get("selectedVariationImage") or data.get("selected_variation_image")),
            cor_selecionada=data.get("cor_selecionada") if isinstance(data.get("cor_selecionada"), dict) else None,
            img_0=_text(pick("img_0", "image0")),
            img_1=_text(pick("img_1", "image1")),
            img_2=_text(pick("img_2", "image2")),
            quantity1=to_quantity(_first_present(data, "quantity", "quantity1")),
            price1=to_price(_first_present(data, "price", "price1", "preco1")),
            quantity2=to_quantity(data.get("quantity2")),
            price2=to_price(_first_present(data, "price2", "preco2")),
            quantity3=to_quantity(data.get("quantity3")),
            price3=to_price(_first_present(data, "price3", "preco3")),
            personalizacao=_text(pick("personalizacao", "personalization")),
            gravacao=_text(pick("gravacao", "engraving")),
            observations=_text(data.get("observations")),
            observacoes=_text(_first_present(data, "observacoes", "notes")),
            info=_text(data.get("info")),
            custo=data.get("custo"),
            preco_unitario=data.get("preco_unitario"),
            valor_unitario=data.get("valor_unitario"),
            fator=data.get("fator"),
            original_indexes=list(data.get("original_indexes") or []),
        )

    def tier(self, number: int) -> tuple:
        return getattr(self, f"quantity{number}"), getattr(self, f"price{number}")

    def subtotal(self, number: int) -> Decimal:
        quantity, price = self.tier(number)
        return Decimal(quantity) * price

    @property
    def total_value(self) -> Decimal:
        return self.subtotal(1) + self.subtotal(2) + self.subtotal(3)

    def copy(self, **changes) -> "SelectedProduct":
        return replace(self, **changes)
