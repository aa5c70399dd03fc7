"""
Interfaces de repositórios seguindo Clean Architecture.
Define contratos que devem ser implementados pela camada de infraestrutura.
"""

from .trade_store import ITradeStore

__all__ = ['ITradeStore']
