# domain/exceptions.py
"""
Hierarquia de erros do ledger de trades.
Todos os erros são reportados ao chamador imediato; nenhum é engolido.
"""


class LedgerError(Exception):
    """Erro base de todas as operações do ledger."""


class ValidationError(LedgerError):
    """Entrada malformada para book/amend (notional negativo, contraparte vazia...)."""


class NotFoundError(LedgerError):
    """A operação referenciou um tradeRef inexistente."""

    def __init__(self, trade_ref: str):
        super().__init__(f"Trade {trade_ref} não encontrado")
        self.trade_ref = trade_ref


class InvalidStateError(LedgerError):
    """Operação tentada sobre um trade terminal (VERIFIED/CANCELLED)."""

    def __init__(self, trade_ref: str, status: str, operation: str):
        super().__init__(f"Trade {trade_ref} está {status}: {operation} não permitido")
        self.trade_ref = trade_ref
        self.status = status
        self.operation = operation
