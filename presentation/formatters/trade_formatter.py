# presentation/formatters/trade_formatter.py
"""
Formatação dos trades para exibição no blotter.
"""

from datetime import datetime
from typing import List

from domain.entities.trade import HistoryAction, Trade, TradeHistoryEntry, TradeStatus
from application.services.trade_query_engine import TradeKpis


class TradeFormatter:
    """Converte entidades do ledger em textos com markup do Rich."""

    # Cores dos badges de status
    STATUS_COLORS = {
        TradeStatus.LIVE: "blue",
        TradeStatus.VERIFIED: "green",
        TradeStatus.CANCELLED: "red"
    }

    ACTION_EMOJIS = {
        HistoryAction.BOOK: "📝",
        HistoryAction.AMEND: "✏️",
        HistoryAction.VERIFIED: "✅",
        HistoryAction.CANCELLED: "❌",
        HistoryAction.UPDATE: "🔄"
    }

    CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "BRL": "R$"}

    def __init__(self, currency: str = "USD"):
        self.currency_symbol = self.CURRENCY_SYMBOLS.get(currency, f"{currency} ")

    def format_currency(self, amount: float) -> str:
        return f"{self.currency_symbol}{amount:,.2f}"

    def format_time(self, moment: datetime) -> str:
        return moment.astimezone().strftime("%H:%M:%S")

    def status_badge(self, status: TradeStatus) -> str:
        color = self.STATUS_COLORS.get(status, "white")
        return f"[bold {color}]{status.value}[/bold {color}]"

    def format_row(self, trade: Trade) -> List[str]:
        """Linha da tabela: Status, Updated, Ref, Subject, Source, Counterparty, Notional."""
        trade_ref = trade.trade_ref
        if trade.status == TradeStatus.CANCELLED:
            # Trades cancelados aparecem riscados
            cells = [trade_ref, trade.subject, trade.source, trade.counterparty]
            trade_ref, subject, source, counterparty = [f"[dim strike]{c}[/dim strike]" for c in cells]
        else:
            trade_ref = f"[bold]{trade_ref}[/bold]"
            subject, source, counterparty = trade.subject, trade.source, trade.counterparty

        return [
            self.status_badge(trade.status),
            self.format_time(trade.updated_at),
            trade_ref,
            subject,
            source,
            counterparty,
            self.format_currency(trade.notional),
        ]

    def format_history_entry(self, entry: TradeHistoryEntry) -> str:
        emoji = self.ACTION_EMOJIS.get(entry.action, "📌")
        return (
            f"[cyan]{entry.timestamp.astimezone().strftime('%Y-%m-%d %H:%M:%S')}[/cyan] "
            f"{emoji} [bold]{entry.action.value}[/bold] "
            f"[dim]{entry.user}[/dim] {entry.note}"
        )

    def format_kpis(self, kpis: TradeKpis) -> str:
        return (
            f"Trades: [bold]{kpis.total}[/bold]  •  "
            f"Exposição LIVE: [bold green]{self.format_currency(kpis.live_exposure)}[/bold green]  •  "
            f"Pendentes: [bold yellow]{kpis.pending_count}[/bold yellow]"
        )
