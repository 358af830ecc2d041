"""
Logging estruturado em JSON
"""
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Formatter JSON com timestamp ISO 8601 e localização do código"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['location'] = {
            'file': record.pathname,
            'line': record.lineno,
            'function': record.funcName
        }


def setup_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configura o logging da aplicação

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Se True, usa formato JSON. Se False, usa formato texto.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)

    if json_logs:
        formatter = CustomJsonFormatter('%(timestamp)s %(level)s %(name)s %(message)s')
    else:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # Bibliotecas ruidosas
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def log_request(
    logger: logging.Logger,
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    ip_address: Optional[str] = None
):
    """Loga uma requisição HTTP"""
    logger.info(
        "HTTP Request",
        extra={
            'http': {
                'method': method,
                'path': path,
                'status_code': status_code,
                'duration_ms': duration_ms
            },
            'ip_address': ip_address
        }
    )


def log_quote_lines_write(
    logger: logging.Logger,
    solicitacao_id: int,
    rows_deleted: int,
    rows_inserted: int,
    duration_ms: float,
    error: Optional[str] = None
):
    """
    Loga a substituição das linhas de produtos de um orçamento

    Args:
        logger: Logger a ser usado
        solicitacao_id: ID da solicitação de orçamento
        rows_deleted: Linhas anteriores removidas
        rows_inserted: Linhas novas inseridas (0 em caso de falha)
        duration_ms: Duração da transação em milissegundos
        error: Mensagem de erro se a transação foi desfeita
    """
    level = logging.ERROR if error else logging.INFO

    logger.log(
        level,
        "Quote lines replaced" if not error else "Quote lines write rolled back",
        extra={
            'quote_lines': {
                'solicitacao_id': solicitacao_id,
                'rows_deleted': rows_deleted,
                'rows_inserted': rows_inserted,
                'duration_ms': duration_ms,
                'error': error
            }
        }
    )


def log_security_event(
    logger: logging.Logger,
    event_type: str,
    user_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    severity: str = "INFO"
):
    """
    Loga um evento de segurança

    Args:
        event_type: Tipo do evento (invalid_token, inactive_consultor, forbidden, etc)
        severity: Severidade (INFO, WARNING, ERROR, CRITICAL)
    """
    level = getattr(logging, severity.upper(), logging.INFO)

    logger.log(
        level,
        f"Security Event: {event_type}",
        extra={
            'security': {
                'event_type': event_type,
                'user_id': user_id,
                'details': details or {}
            }
        }
    )
