"""
Módulo de armazenamento do ledger.
Fornece a implementação em memória do repositório de trades.
"""

from .trade_memory_store import TradeMemoryStore

__all__ = ['TradeMemoryStore']
