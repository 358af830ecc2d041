"""
Ciclo de vida do orçamento: Solicitado -> Gerado -> Aprovado.

Depois de gerado, o orçamento fica somente leitura para o editor, exceto
quando é uma cópia (duplicação), que sempre pode ser editada.
"""
import enum
from typing import Optional

COPY_MARKER = "Cópia do orçamento"

# Rótulo antigo, equivalente a "Gerado"
LEGACY_SENT_LABEL = "Orçamento Enviado"


class QuoteStatus(str, enum.Enum):
    SOLICITADO = "Orçamento Solicitado"
    GERADO = "Orçamento Gerado"
    APROVADO = "Orçamento Aprovado"

    @classmethod
    def from_label(cls, value: Optional[str]) -> Optional["QuoteStatus"]:
        """Rótulo ou nome do status; None quando não reconhecido"""
        if isinstance(value, QuoteStatus):
            return value
        text = (value or "").strip()
        if text == LEGACY_SENT_LABEL:
            return cls.GERADO
        for status in cls:
            if status.value == text or status.name == text.upper():
                return status
        return None

    @classmethod
    def parse(cls, value: Optional[str]) -> "QuoteStatus":
        """Lê o rótulo gravado no banco; vazio/desconhecido é tratado como Solicitado"""
        return cls.from_label(value) or cls.SOLICITADO


_ORDER = [QuoteStatus.SOLICITADO, QuoteStatus.GERADO, QuoteStatus.APROVADO]


class QuoteReadOnlyError(Exception):
    """Tentativa de editar um orçamento já gerado"""

    def __init__(self, solicitacao_id: Optional[int], status: QuoteStatus):
        self.solicitacao_id = solicitacao_id
        self.status = status
        super().__init__(f"Orçamento {solicitacao_id} está em '{status.value}' e não pode ser editado")


class InvalidStatusTransition(Exception):
    def __init__(self, current: QuoteStatus, target: Optional[QuoteStatus] = None):
        self.current = current
        self.target = target
        destino = target.value if target else "próximo status"
        super().__init__(f"Transição inválida: '{current.value}' -> '{destino}'")


def is_copy(observacao: Optional[str]) -> bool:
    return bool(observacao) and COPY_MARKER in observacao


def is_editable(status: Optional[str], observacao: Optional[str] = None) -> bool:
    if is_copy(observacao):
        return True
    return QuoteStatus.parse(status) == QuoteStatus.SOLICITADO


def ensure_editable(solicitacao_id: Optional[int], status: Optional[str], observacao: Optional[str] = None) -> None:
    if not is_editable(status, observacao):
        raise QuoteReadOnlyError(solicitacao_id, QuoteStatus.parse(status))


def advance(status: Optional[str]) -> QuoteStatus:
    """Próximo status da progressão linear"""
    current = QuoteStatus.parse(status)
    position = _ORDER.index(current)
    if position + 1 >= len(_ORDER):
        raise InvalidStatusTransition(current)
    return _ORDER[position + 1]


def transition(status: Optional[str], target: QuoteStatus) -> QuoteStatus:
    """Valida a mudança para `target`: apenas o próximo passo é permitido"""
    current = QuoteStatus.parse(status)
    if _ORDER.index(target) != _ORDER.index(current) + 1:
        raise InvalidStatusTransition(current, target)
    return target
