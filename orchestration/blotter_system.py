import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.table import Table

from application.interfaces.system_event_bus import TradeEvents
from application.services.trade_api_service import TradeApiService
from application.services.trade_query_engine import TradeQueryEngine
from infrastructure.data_sources.seed_trades import build_seed_trades
from infrastructure.event_bus.local_event_bus import LocalEventBus
from infrastructure.export.csv_exporter import CsvTradeExporter
from infrastructure.logging.json_audit_repository import JsonAuditRepository
from infrastructure.store.trade_memory_store import TradeMemoryStore
from orchestration.audit_handlers import AuditEventHandlers
from presentation.formatters.trade_formatter import TradeFormatter
from presentation.state.blotter_state import BlotterViewState

logger = logging.getLogger(__name__)


class BlotterSystem:
    """
    Monta e executa o blotter: ledger, barramento, auditoria e interface.
    Cada instância tem seu próprio ledger; nada é compartilhado no processo.
    """

    def __init__(
        self,
        console: Console,
        store_config: Optional[Dict] = None,
        api_config: Optional[Dict] = None,
        display_config: Optional[Dict] = None,
        seed_config: Optional[Dict] = None,
        system_config: Optional[Dict] = None
    ):
        self.console = console
        self.store_config = store_config or {}
        self.api_config = api_config or {}
        self.display_config = display_config or {}
        self.seed_config = seed_config or {}
        self.system_config = system_config or {}
        self.components: Dict[str, Any] = {}
        self.current_phase = "INITIALIZATION"

    def initialize(self, seed: Optional[bool] = None) -> bool:
        """Cria os componentes e carrega os dados de demonstração."""
        try:
            self.event_bus = LocalEventBus()
            self.store = TradeMemoryStore(
                ref_prefix=self.store_config.get('ref_prefix', 'NEW'),
                default_user=self.store_config.get('default_user', 'user_ui')
            )
            self.audit_repo = JsonAuditRepository(
                log_dir=self.system_config.get('log_dir', 'logs'),
                flush_interval=self.system_config.get('audit_flush_interval', 5)
            )
            self.audit_handlers = AuditEventHandlers(self.event_bus, self.audit_repo)
            self.audit_handlers.subscribe_to_events()

            self.api = TradeApiService(self.store, self.event_bus, self.api_config)
            self.query_engine = TradeQueryEngine()
            self.formatter = TradeFormatter(self.display_config.get('currency', 'USD'))
            self.exporter = CsvTradeExporter()

            self.components.update(
                event_bus=self.event_bus,
                store=self.store,
                audit_repo=self.audit_repo,
                api=self.api,
                query_engine=self.query_engine
            )

            if seed is None:
                seed = self.seed_config.get('enabled', True)
            if seed:
                trades = build_seed_trades(user=self.seed_config.get('user', 'system'))
                self.store.load(trades)
                self.event_bus.publish(TradeEvents.TRADES_LOADED, {'count': len(trades)})

            self.current_phase = "READY"
            logger.info(f"BlotterSystem inicializado com {len(self.store)} trades")
            return True

        except Exception as e:
            logger.critical(f"Erro ao inicializar o blotter: {e}", exc_info=True)
            self.console.print(f"[red]✗ Erro na inicialização: {e}[/red]")
            return False

    def run_interactive(self):
        """Executa a interface Textual até o usuário sair."""
        from presentation.display.blotter_app import BlotterApp

        self.current_phase = "NORMAL"
        config = dict(self.display_config)
        config['export_path'] = str(Path(self.system_config.get('export_dir', 'exports')) / 'trades.csv')
        app = BlotterApp(
            api=self.api,
            view_state=BlotterViewState(self.query_engine, max_toasts=config.get('max_toasts', 5)),
            formatter=self.formatter,
            exporter=self.exporter,
            config=config
        )
        app.run()

    def print_blotter(self, view_state: Optional[BlotterViewState] = None):
        """Imprime o blotter no console (modo headless)."""
        view_state = view_state or BlotterViewState(self.query_engine)
        trades = asyncio.run(self.api.fetch_trades())
        snapshot = view_state.render(trades)

        table = Table(title="Trade Blotter", show_lines=False)
        for column in ("Status", "Updated", "Ref", "Subject", "Source", "Counterparty", "Notional"):
            table.add_column(column, justify="right" if column == "Notional" else "left")
        for trade in snapshot.rows:
            table.add_row(*self.formatter.format_row(trade))

        self.console.print(table)
        self.console.print(self.formatter.format_kpis(snapshot.kpis))

    def export_csv(self, path) -> Path:
        return self.exporter.export(self.store.get_all(), path)

    def shutdown(self):
        """Encerramento ordenado: publica o shutdown e fecha o diário de auditoria."""
        self.current_phase = "SHUTDOWN"
        if not hasattr(self, 'audit_repo'):
            return

        stats = self.store.get_stats()
        self.event_bus.publish(TradeEvents.SYSTEM_SHUTDOWN, {'reason': 'normal', 'stats': stats})
        self.audit_repo.close()

        ops = stats['operations']
        self.console.print("\n[cyan]📊 Estatísticas do ledger:[/cyan]")
        self.console.print(f"   • Trades em memória: {stats['total_trades']}")
        self.console.print(f"   • Bookings: {ops['booked']}  Amends: {ops['amended']}")
        self.console.print(f"   • Verificados: {ops['verified']}  Cancelados: {ops['cancelled']}")
        self.console.print(f"   • Operações rejeitadas: {ops['rejected']}")
        logger.info("BlotterSystem encerrado")
