"""
Resolução da imagem de um produto para a cor/variação selecionada.

Os dados do catálogo são inconsistentes (alguns produtos têm imagem por
variação, outros só a imagem principal, outros uma URL quebrada), então a
imagem é escolhida por uma ordem de prioridade, a primeira que existir:

1. Imagem escolhida manualmente no seletor de cores (selected_variation_image)
2. Imagem do snapshot `cor_selecionada` (variação casada no JSON `variacoes`)
3. Imagem da variação cuja cor é igual à cor atual (sem diferenciar caixa/espaços)
4. Tabela estática cor -> slot genérico (img_0/1/2); heurística, não autoritativa
5. Primeiro slot genérico preenchido (img_0, img_1, img_2)
6. PLACEHOLDER_IMAGE

A resolução é pura e determinística: a mesma entrada sempre produz a mesma
URL, o que mantém auditável a imagem gravada em cada orçamento.
"""
import re
import unicodedata
from typing import Any, Dict, List, Optional

from ecologic.models.selection import SelectedProduct, Variation

PLACEHOLDER_IMAGE = "/placeholder-product.svg"

# Tabela cor -> slot de imagem genérica. Pode ser reduzida à medida que o
# catálogo ganhar imagens por variação.
COLOR_IMAGE_SLOTS: Dict[str, str] = {
    "verde escuro": "img_0",
    "marrom": "img_1",
    "preto": "img_2",
    "azul": "img_0",
    "vermelho": "img_1",
    "branco": "img_2",
    "inox": "img_0",
    "rosa": "img_1",
    "amarelo": "img_0",
    "cinza": "img_1",
    "transparente": "img_0",
    "red": "img_1",
    "blue": "img_0",
    "black": "img_2",
    "white": "img_2",
    "green": "img_0",
    "yellow": "img_0",
    "gray": "img_1",
    "grey": "img_1",
}

GENERIC_SLOTS = ("img_0", "img_1", "img_2")

# Valores que chegam do front-end quando a URL nunca foi preenchida
_BROKEN_VALUES = {"undefined", "null", "none", "nan", "about:blank"}

_DRIVE_FILE = re.compile(r"/file/d/([a-zA-Z0-9_-]+)")
_DRIVE_QUERY = re.compile(r"[?&]id=([a-zA-Z0-9_-]+)")


def normalize_color(value: Optional[str]) -> str:
    """Minúsculas, sem acentos, espaços colapsados"""
    if not value:
        return ""
    text = unicodedata.normalize("NFD", str(value).lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return re.sub(r"\s+", " ", text).strip()


def sanitize_image_url(url: Optional[str]) -> Optional[str]:
    """
    Normaliza uma URL de imagem ou retorna None se ela não for utilizável.

    Aceita data:image, http(s) e caminhos relativos ao site. Links de
    compartilhamento do Google Drive são convertidos para o link direto.
    """
    if not url or not isinstance(url, str):
        return None
    text = url.strip()
    if not text or text.lower() in _BROKEN_VALUES:
        return None
    if text.startswith("data:image/"):
        return text
    if "drive.google.com" in text:
        match = _DRIVE_FILE.search(text) or _DRIVE_QUERY.search(text)
        if match:
            return f"https://drive.google.com/uc?export=view&id={match.group(1)}"
    if re.match(r"^https?://[^\s/]+", text):
        return text
    if text.startswith("/") and not text.startswith("//"):
        return text
    return None


def is_valid_image_url(url: Optional[str]) -> bool:
    return sanitize_image_url(url) is not None


def find_variation(variations: List[Variation], color: Optional[str]) -> Optional[Variation]:
    """Variação cuja cor é igual a `color`, ignorando caixa e espaços nas pontas"""
    if not color:
        return None
    wanted = color.strip().lower()
    for variation in variations:
        if variation.color.strip().lower() == wanted:
            return variation
    return None


def selected_color_snapshot(product: SelectedProduct) -> Optional[Dict[str, Any]]:
    """
    Snapshot estruturado da variação selecionada (`cor_selecionada`).

    Um snapshot já carregado no produto prevalece se for da cor atual; caso
    contrário a variação é procurada pela cor ou pelo nome, sem acentos.
    """
    wanted = normalize_color(product.color)
    if not wanted:
        return None

    stored = product.cor_selecionada
    if stored and wanted in (normalize_color(stored.get("cor")), normalize_color(stored.get("nome"))):
        return dict(stored)

    for variation in product.variations:
        if wanted in (normalize_color(variation.color), normalize_color(variation.name)):
            return {
                "cor": variation.color,
                "nome": variation.name or variation.color,
                "codigo": variation.code,
                "imagem": variation.image_url,
            }
    return None


def _raw_candidates(product: SelectedProduct) -> List[Optional[str]]:
    candidates: List[Optional[str]] = [product.selected_variation_image]

    snapshot = selected_color_snapshot(product)
    if snapshot:
        candidates.append(snapshot.get("imagem"))

    variation = find_variation(product.variations, product.color)
    if variation:
        candidates.append(variation.image_url)

    slot = COLOR_IMAGE_SLOTS.get((product.color or "").strip().lower())
    if slot:
        candidates.append(getattr(product, slot))

    candidates.extend(getattr(product, name) for name in GENERIC_SLOTS)
    return candidates


def image_candidates(product: SelectedProduct) -> List[str]:
    """
    Lista ordenada, sem repetições, das URLs válidas na ordem de prioridade,
    sempre terminando no placeholder.
    """
    result: List[str] = []
    for raw in _raw_candidates(product):
        url = sanitize_image_url(raw)
        if url and url not in result:
            result.append(url)
    if PLACEHOLDER_IMAGE not in result:
        result.append(PLACEHOLDER_IMAGE)
    return result


def resolve_variation_image(product: SelectedProduct) -> str:
    """Melhor imagem para a cor atual; nunca vazia"""
    return image_candidates(product)[0]


def next_fallback(product: SelectedProduct, failed_url: Optional[str]) -> str:
    """
    Próxima imagem da cadeia quando `failed_url` não carregou.

    Percorre os candidatos restantes da mesma ordem de prioridade e termina no
    placeholder. Se `failed_url` não é um candidato, recomeça pelo primeiro.
    """
    candidates = image_candidates(product)
    failed = sanitize_image_url(failed_url)
    if failed not in candidates:
        return candidates[0]
    position = candidates.index(failed)
    if position + 1 < len(candidates):
        return candidates[position + 1]
    return PLACEHOLDER_IMAGE


def variation_image(product: SelectedProduct) -> Optional[str]:
    """
    Imagem da variação gravada em `imagem_variacao`: a escolha manual ou, na
    falta dela, a imagem da variação casada. None se nenhuma existir.
    """
    if product.selected_variation_image:
        return product.selected_variation_image
    snapshot = selected_color_snapshot(product)
    if snapshot and snapshot.get("imagem"):
        return snapshot["imagem"]
    return None
