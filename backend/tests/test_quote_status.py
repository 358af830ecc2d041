import pytest

from ecologic.services.quote_status import (
    InvalidStatusTransition,
    QuoteReadOnlyError,
    QuoteStatus,
    advance,
    ensure_editable,
    is_copy,
    is_editable,
    transition,
)


class TestQuoteStatus:
    def test_parse_labels(self):
        assert QuoteStatus.parse("Orçamento Solicitado") == QuoteStatus.SOLICITADO
        assert QuoteStatus.parse("Orçamento Gerado") == QuoteStatus.GERADO
        assert QuoteStatus.parse("Orçamento Aprovado") == QuoteStatus.APROVADO

    def test_legacy_sent_label_is_generated(self):
        assert QuoteStatus.parse("Orçamento Enviado") == QuoteStatus.GERADO

    def test_unknown_or_empty_is_requested(self):
        assert QuoteStatus.parse(None) == QuoteStatus.SOLICITADO
        assert QuoteStatus.parse("qualquer coisa") == QuoteStatus.SOLICITADO

    def test_from_label_does_not_guess(self):
        assert QuoteStatus.from_label("qualquer coisa") is None
        assert QuoteStatus.from_label("aprovado") == QuoteStatus.APROVADO
        assert QuoteStatus.from_label("Orçamento Enviado") == QuoteStatus.GERADO

    def test_advance_is_linear(self):
        assert advance("Orçamento Solicitado") == QuoteStatus.GERADO
        assert advance("Orçamento Gerado") == QuoteStatus.APROVADO

    def test_advance_past_approved_raises(self):
        with pytest.raises(InvalidStatusTransition):
            advance("Orçamento Aprovado")

    def test_transition_rejects_backwards_and_skips(self):
        with pytest.raises(InvalidStatusTransition):
            transition("Orçamento Gerado", QuoteStatus.SOLICITADO)
        with pytest.raises(InvalidStatusTransition):
            transition("Orçamento Solicitado", QuoteStatus.APROVADO)

    def test_transition_to_next(self):
        assert transition("Orçamento Solicitado", QuoteStatus.GERADO) == QuoteStatus.GERADO


class TestEditability:
    def test_requested_is_editable(self):
        assert is_editable("Orçamento Solicitado")

    @pytest.mark.parametrize("status", ["Orçamento Gerado", "Orçamento Enviado", "Orçamento Aprovado"])
    def test_generated_or_later_is_read_only(self, status):
        assert not is_editable(status)
        with pytest.raises(QuoteReadOnlyError):
            ensure_editable(10, status)

    def test_copy_is_always_editable(self):
        observacao = "Cópia do orçamento #10 - cliente pediu nova cor"
        assert is_copy(observacao)
        assert is_editable("Orçamento Gerado", observacao)
        ensure_editable(11, "Orçamento Aprovado", observacao)

    def test_plain_observation_is_not_a_copy(self):
        assert not is_copy("Entregar em São Paulo")
        assert not is_copy(None)
