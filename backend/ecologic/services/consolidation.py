"""
Consolidação dos produtos selecionados em linhas com até três faixas.

A busca do editor adiciona um item por clique; o mesmo produto adicionado
mais de uma vez (mesmo `id`, possivelmente com outra cor) representa a mesma
linha do orçamento com outra faixa de quantidade/preço.

Política de faixas (primeira vaga livre):
    1º item com o id  -> faixa 1
    2º item com o id  -> faixa 2, se vazia
    3º item com o id  -> faixa 3, se vazia
    demais            -> descartados (não existe faixa 4)

Faixa "vazia" significa quantidade zero; uma faixa preenchida nunca é sobrescrita.
"""
import logging
import re
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Sequence, Union

from ecologic.models.selection import SelectedProduct, to_price, to_quantity

logger = logging.getLogger(__name__)

Selection = Union[SelectedProduct, Dict[str, Any]]

# Campos de faixa editáveis na linha consolidada
_TIER_FIELD = re.compile(r"(quantity|price)([123])")


def _as_selected(entry: Selection) -> SelectedProduct:
    if isinstance(entry, SelectedProduct):
        return entry
    return SelectedProduct.from_dict(entry)


def consolidate_products(selections: Iterable[Selection]) -> List[SelectedProduct]:
    """
    Agrupa as seleções por id, preservando a ordem da primeira ocorrência.

    Cada linha retornada carrega `original_indexes` com as posições de entrada
    que a formaram e `tier_sources` com a posição que preencheu cada faixa,
    para que edições possam ser gravadas de volta no item certo.
    A lista de entrada não é alterada.
    """
    consolidated: Dict[str, SelectedProduct] = {}

    for index, entry in enumerate(selections):
        product = _as_selected(entry)
        key = str(product.id)

        existing = consolidated.get(key)
        if existing is None:
            consolidated[key] = product.copy(
                variations=list(product.variations),
                original_indexes=[index],
                tier_sources={
                    number: index for number in (1, 2, 3)
                    if number == 1 or product.tier(number)[0] > 0
                },
            )
            continue

        existing.original_indexes.append(index)

        # Para a entrada extra, `quantity1`/`price1` são a quantidade/preço do item
        incoming_q2 = product.quantity2 or product.quantity1
        incoming_q3 = product.quantity3 or product.quantity1

        if existing.quantity2 == 0 and incoming_q2 > 0:
            existing.quantity2 = incoming_q2
            existing.price2 = product.price2 or product.price1
            existing.tier_sources[2] = index
        elif existing.quantity3 == 0 and incoming_q3 > 0:
            existing.quantity3 = incoming_q3
            existing.price3 = product.price3 or product.price1
            existing.tier_sources[3] = index
        else:
            logger.warning(
                "Produto %s já possui as três faixas preenchidas; item na posição %s descartado",
                key, index,
            )

    return list(consolidated.values())


def _source_field(product: SelectedProduct, kind: str, number: int, is_first: bool) -> str:
    # O primeiro item contribui com as próprias faixas; os demais, com a faixa
    # explícita quando preenchida ou com quantity1/price1
    own = f"{kind}{number}"
    if is_first or getattr(product, own):
        return own
    return f"{kind}1"


def apply_tier_edit(
    selections: Sequence[Selection],
    row: SelectedProduct,
    field_name: str,
    value: Any,
) -> List[SelectedProduct]:
    """
    Grava a edição de um campo da linha consolidada de volta nos itens de origem.

    Campos de faixa vão apenas para o item que preencheu aquela faixa (faixa
    vazia: o primeiro item), de modo que uma nova consolidação reproduza a
    linha editada sem deslocar as outras faixas. Os demais campos são gravados
    em todos os itens de origem.

    Retorna uma nova lista; os itens não contribuintes são mantidos como estão.
    Campos de faixa são normalizados (quantidade inteira, preço Decimal).
    """
    products = [_as_selected(entry) for entry in selections]
    tier_field = _TIER_FIELD.fullmatch(field_name)

    if tier_field is None:
        changes = {index: field_name for index in row.original_indexes}
    else:
        kind, number = tier_field.group(1), int(tier_field.group(2))
        value = to_quantity(value) if kind == "quantity" else to_price(value)
        if not row.original_indexes:
            return products
        first = row.original_indexes[0]
        source = row.tier_sources.get(number, first)
        changes = {source: _source_field(products[source], kind, number, source == first)}

    return [
        product.copy(**{changes[index]: value}) if index in changes else product
        for index, product in enumerate(products)
    ]


def remove_consolidated(selections: Sequence[Selection], row: SelectedProduct) -> List[SelectedProduct]:
    """Remove todos os itens de origem que formaram a linha consolidada"""
    targets = set(row.original_indexes)
    return [_as_selected(entry) for index, entry in enumerate(selections) if index not in targets]


def quote_total(rows: Iterable[SelectedProduct]) -> Decimal:
    """Soma dos subtotais das três faixas de todas as linhas"""
    return sum((row.total_value for row in rows), Decimal("0"))
