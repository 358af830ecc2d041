"""
Testes do serviço de orçamentos (gravação, duplicação e status)
"""
from decimal import Decimal

import pytest

from ecologic.models import QuoteRequest
from ecologic.services.quote_service import QuoteNotFoundError, QuoteService
from ecologic.services.quote_status import (
    InvalidStatusTransition,
    QuoteReadOnlyError,
    QuoteStatus,
)

SELECTIONS = [
    {"id": "CAN-001", "codigo": "CAN-001", "quantity": 100, "price": "2.50", "color": "Azul"},
    {"id": "CAN-001", "codigo": "CAN-001", "quantity": 250, "price": "2.20", "color": "Verde"},
    {"id": "SAC-010", "codigo": "SAC-010", "quantity": 50, "price": "12.00"},
]


class TestSaveProducts:
    def test_consolidates_and_persists(self, db, make_quote):
        quote = make_quote()
        service = QuoteService(db)

        rows = service.save_products(quote.solicitacao_id, SELECTIONS)

        assert [row.id for row in rows] == ["CAN-001", "SAC-010"]
        lines = service.list_lines(quote.solicitacao_id)
        assert [(l.products_id, l.products_quantidade_01, l.products_quantidade_02) for l in lines] == [
            ("CAN-001", 100, 250),
            ("SAC-010", 50, 0),
        ]
        db.refresh(quote)
        assert quote.valor_total_estimado == Decimal("1400.00")

    def test_generated_quote_is_read_only(self, db, make_quote):
        quote = make_quote(status=QuoteStatus.GERADO.value)

        with pytest.raises(QuoteReadOnlyError):
            QuoteService(db).save_products(quote.solicitacao_id, SELECTIONS)

        assert QuoteService(db).list_lines(quote.solicitacao_id) == []

    def test_copy_of_generated_quote_is_editable(self, db, make_quote):
        quote = make_quote(
            status=QuoteStatus.GERADO.value,
            solicitacao_observacao="Cópia do orçamento #1 - ",
        )

        rows = QuoteService(db).save_products(quote.solicitacao_id, SELECTIONS)

        assert len(rows) == 2

    def test_unknown_quote(self, db):
        with pytest.raises(QuoteNotFoundError):
            QuoteService(db).save_products(999, SELECTIONS)


class TestLoadSelections:
    def test_rebuilds_products_with_catalog_images(self, db, make_quote, catalog_product):
        quote = make_quote()
        service = QuoteService(db)
        service.save_products(quote.solicitacao_id, [
            {"id": "CAN-001", "codigo": "CAN-001", "quantity": 100, "price": "2.50", "color": "Verde",
             "variacoes": catalog_product.variacoes},
        ])

        products = service.load_selections(quote.solicitacao_id)

        assert len(products) == 1
        product = products[0]
        assert product.name == "Caneca Ecológica"
        assert product.quantity1 == 100
        assert product.price1 == Decimal("2.50")
        assert product.cor_selecionada["codigo"] == "CAN-001-VD"
        assert product.selected_variation_image == "https://cdn.example.com/caneca-verde.jpg"


class TestDuplicate:
    def test_copies_request_and_lines(self, db, make_quote):
        quote = make_quote(solicitacao_observacao="Entrega urgente", prazo_entrega="10 dias úteis")
        service = QuoteService(db)
        service.save_products(quote.solicitacao_id, SELECTIONS)
        quote.status = QuoteStatus.GERADO.value
        db.commit()

        copy = service.duplicate(quote.solicitacao_id)

        assert copy.solicitacao_id != quote.solicitacao_id
        assert copy.solicitacao_observacao == f"Cópia do orçamento #{quote.solicitacao_id} - Entrega urgente"
        assert copy.status == QuoteStatus.GERADO.value
        assert copy.prazo_entrega == "10 dias úteis"
        copied = service.list_lines(copy.solicitacao_id)
        original = service.list_lines(quote.solicitacao_id)
        assert [l.products_id for l in copied] == [l.products_id for l in original]
        assert [l.valor_qtd02 for l in copied] == [l.valor_qtd02 for l in original]

    def test_copy_is_editable(self, db, make_quote):
        quote = make_quote(status=QuoteStatus.APROVADO.value)
        service = QuoteService(db)

        copy = service.duplicate(quote.solicitacao_id)
        service.save_products(copy.solicitacao_id, SELECTIONS)

        assert service.get_quote(copy.solicitacao_id).editable is True
        assert service.get_quote(quote.solicitacao_id).editable is False

    def test_empty_observation(self, db, make_quote):
        quote = make_quote()

        copy = QuoteService(db).duplicate(quote.solicitacao_id)

        assert copy.solicitacao_observacao == f"Cópia do orçamento #{quote.solicitacao_id} - "


class TestStatus:
    def test_advance(self, db, make_quote):
        quote = make_quote()
        service = QuoteService(db)

        view = service.advance_status(quote.solicitacao_id)

        assert view.status == QuoteStatus.GERADO
        assert view.editable is False
        assert db.get(QuoteRequest, quote.solicitacao_id).status == "Orçamento Gerado"

    def test_change_to_next(self, db, make_quote):
        quote = make_quote(status=QuoteStatus.GERADO.value)

        view = QuoteService(db).change_status(quote.solicitacao_id, QuoteStatus.APROVADO)

        assert view.status == QuoteStatus.APROVADO

    def test_backwards_is_rejected(self, db, make_quote):
        quote = make_quote(status=QuoteStatus.GERADO.value)

        with pytest.raises(InvalidStatusTransition):
            QuoteService(db).change_status(quote.solicitacao_id, QuoteStatus.SOLICITADO)

    def test_get_quote_number_fallback(self, db, make_quote):
        quote = make_quote()

        view = QuoteService(db).get_quote(quote.solicitacao_id)

        assert view.numero_orcamento == f"ORC-{quote.solicitacao_id:04d}"
