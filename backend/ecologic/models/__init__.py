from .quote_request import QuoteRequest
from .quote_line import QuoteLine
from .catalog_product import CatalogProduct
from .consultor import Consultor, ConsultorRole
from .selection import SelectedProduct, Variation, parse_variations

__all__ = [
    "QuoteRequest",
    "QuoteLine",
    "CatalogProduct",
    "Consultor",
    "ConsultorRole",
    "SelectedProduct",
    "Variation",
    "parse_variations",
]
