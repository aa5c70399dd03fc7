# presentation/display/blotter_app.py
"""
Blotter de trades usando Textual.
Tabela, KPIs, busca, filtro, ordenação por cabeçalho, histórico da linha
expandida e formulário modal de booking/amend.
"""

from typing import Callable, Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Footer, Header, Input, Label, Static

from domain.entities.trade import Trade, TradeStatus
from domain.exceptions import LedgerError
from application.services.trade_api_service import TradeApiService
from application.services.trade_query_engine import SortDir, SortKey
from infrastructure.export.csv_exporter import CsvTradeExporter
from presentation.formatters.trade_formatter import TradeFormatter
from presentation.state.blotter_state import BlotterViewState

COLUMNS = [
    ("Status", SortKey.STATUS.value),
    ("Updated", SortKey.UPDATED_AT.value),
    ("Ref", SortKey.TRADE_REF.value),
    ("Subject", "subject"),
    ("Source", "source"),
    ("Counterparty", "counterparty"),
    ("Notional", SortKey.NOTIONAL.value),
]

SORTABLE_COLUMNS = {key.value for key in SortKey}

TOAST_SEVERITY = {"info": "information", "success": "information", "warning": "warning", "error": "error"}


FORM_FIELDS = ("subject", "source", "counterparty", "notional")


def booking_from_form(values: dict) -> dict:
    """Dados do booking; notional em branco vale 0."""
    data = dict(values)
    if data.get("notional", "") == "":
        data["notional"] = 0
    return data


def _same_notional(value: str, notional: float) -> bool:
    try:
        return float(value) == notional
    except ValueError:
        return False


def amendment_from_form(trade: Trade, values: dict) -> dict:
    """Apenas os campos alterados; notional comparado numericamente."""
    changes = {}
    for name, value in values.items():
        if name == "notional":
            unchanged = value == "" or _same_notional(value, trade.notional)
        else:
            unchanged = value == getattr(trade, name)
        if not unchanged:
            changes[name] = value
    return changes


class TradeFormScreen(ModalScreen):
    """Formulário modal de booking (trade=None) ou amend."""

    CSS = """
    TradeFormScreen {
        align: center middle;
    }

    #trade-form {
        width: 60;
        height: auto;
        border: solid $primary;
        background: $panel;
        padding: 1 2;
    }

    #form-buttons {
        height: auto;
        margin-top: 1;
    }
    """

    def __init__(self, trade: Optional[Trade] = None, **kwargs):
        super().__init__(**kwargs)
        self.trade = trade

    def compose(self) -> ComposeResult:
        trade = self.trade
        title = f"✏️ AMEND {trade.trade_ref}" if trade else "📝 NOVO BOOKING"
        with Vertical(id="trade-form"):
            yield Label(title, classes="panel-title")
            yield Input(value=trade.subject if trade else "VANILLA_SWAPTION", placeholder="Subject", id="subject")
            yield Input(value=trade.source if trade else "INTERNAL_UI", placeholder="Source", id="source")
            yield Input(value=trade.counterparty if trade else "", placeholder="Counterparty", id="counterparty")
            yield Input(
                value=f"{trade.notional:.2f}" if trade else "",
                placeholder="Notional",
                type="number",
                id="notional"
            )
            with Horizontal(id="form-buttons"):
                yield Button("Salvar", variant="success", id="save")
                yield Button("Cancelar", variant="default", id="cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id != "save":
            self.dismiss(None)
            return

        values = {
            name: self.query_one(f"#{name}", Input).value.strip()
            for name in FORM_FIELDS
        }
        if self.trade:
            self.dismiss(amendment_from_form(self.trade, values))
        else:
            self.dismiss(booking_from_form(values))


class BlotterApp(App):
    """Aplicação Textual principal do blotter."""

    CSS = """
    Screen {
        background: $surface;
    }

    #kpi-container {
        height: 3;
        background: $panel;
        border: solid $primary;
        content-align: center middle;
    }

    #toolbar {
        height: 3;
    }

    #search {
        width: 1fr;
    }

    #filter-info {
        width: 40;
        content-align: center middle;
    }

    #trades-table {
        height: 1fr;
        border: solid $success;
    }

    #history-area {
        height: 30%;
        border: solid $accent;
        padding: 0 1;
    }

    .panel-title {
        text-style: bold;
        color: $warning;
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Sair"),
        Binding("n", "book", "Novo Booking"),
        Binding("a", "amend", "Amend"),
        Binding("v", "verify", "Verificar"),
        Binding("x", "cancel_trade", "Cancelar"),
        Binding("f", "cycle_filter", "Filtro"),
        Binding("e", "export", "Exportar CSV"),
        Binding("r", "refresh", "Atualizar"),
        Binding("/", "focus_search", "Buscar"),
        Binding("escape", "focus_table", "Tabela", show=False),
    ]

    def __init__(
        self,
        api: TradeApiService,
        view_state: Optional[BlotterViewState] = None,
        formatter: Optional[TradeFormatter] = None,
        exporter: Optional[CsvTradeExporter] = None,
        config: Optional[dict] = None,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.api = api
        self.config = config or {}
        self.view_state = view_state or BlotterViewState(max_toasts=self.config.get('max_toasts', 5))
        self.formatter = formatter or TradeFormatter(self.config.get('currency', 'USD'))
        self.exporter = exporter or CsvTradeExporter()
        self.export_path = self.config.get('export_path', 'exports/trades.csv')
        self.selected_ref: Optional[str] = None
        self.trades = []

    def compose(self) -> ComposeResult:
        yield Header()

        with Container(id="kpi-container"):
            yield Label("", id="kpi-info")

        with Horizontal(id="toolbar"):
            yield Input(placeholder="Buscar por ref, contraparte ou subject...", id="search")
            yield Label("", id="filter-info")

        table = DataTable(id="trades-table", cursor_type="row", zebra_stripes=True)
        yield table

        with Vertical(id="history-area"):
            yield Label("🕑 HISTÓRICO", classes="panel-title")
            yield Static("[dim]Selecione um trade e pressione Enter[/dim]", id="history-content")

        yield Footer()

    async def on_mount(self) -> None:
        self.title = self.config.get('title', 'SimpleTrade')
        self.sub_title = self.config.get('sub_title', 'Trade Blotter')

        table = self.query_one("#trades-table", DataTable)
        for label, key in COLUMNS:
            table.add_column(label, key=key)
        table.focus()

        await self.reload()

        interval = self.config.get('refresh_interval', 0)
        if interval:
            self.set_interval(interval, self.reload)

    # --- Renderização ---

    async def reload(self) -> None:
        """Busca um snapshot novo e redesenha."""
        try:
            self.trades = await self.api.fetch_trades()
        except LedgerError as e:
            self.toast(f"Falha ao carregar trades: {e}", "error")
            return
        self.refresh_view()

    def refresh_view(self) -> None:
        snapshot = self.view_state.render(self.trades)

        self.query_one("#kpi-info", Label).update(self.formatter.format_kpis(snapshot.kpis))
        self._update_filter_info(len(snapshot.rows))

        table = self.query_one("#trades-table", DataTable)
        table.clear()
        for trade in snapshot.rows:
            cells = [Text.from_markup(cell) for cell in self.formatter.format_row(trade)]
            table.add_row(*cells, key=trade.trade_ref)

        refs = [t.trade_ref for t in snapshot.rows]
        if self.selected_ref in refs:
            table.move_cursor(row=refs.index(self.selected_ref))
        elif refs:
            self.selected_ref = refs[0]
        else:
            self.selected_ref = None

        self._update_history(snapshot.expanded)

    def _update_filter_info(self, visible: int):
        arrow = "▲" if self.view_state.sort_dir == SortDir.ASC else "▼"
        self.query_one("#filter-info", Label).update(
            f"Filtro: [bold]{self.view_state.status_filter.value}[/bold] | "
            f"{self.view_state.sort_key.value} {arrow} | {visible} linhas"
        )

    def _update_history(self, trade: Optional[Trade]):
        content = self.query_one("#history-content", Static)
        if trade is None:
            content.update("[dim]Selecione um trade e pressione Enter[/dim]")
            return
        lines = [f"[bold]{trade.trade_ref}[/bold] {self.formatter.status_badge(trade.status)}"]
        lines.extend(self.formatter.format_history_entry(entry) for entry in trade.history)
        content.update("\n".join(lines))

    def toast(self, message: str, level: str = "info"):
        self.view_state.push_toast(message, level)
        self.notify(message, severity=TOAST_SEVERITY.get(level, "information"))

    # --- Eventos ---

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search":
            self.view_state.set_search(event.value)
            self.refresh_view()

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key is not None:
            self.selected_ref = event.row_key.value

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        self.view_state.toggle_expanded(event.row_key.value)
        self.refresh_view()

    def on_data_table_header_selected(self, event: DataTable.HeaderSelected) -> None:
        key = event.column_key.value
        if key in SORTABLE_COLUMNS:
            self.view_state.toggle_sort(key)
            self.refresh_view()

    # --- Ações ---

    def _selected_trade(self) -> Optional[Trade]:
        return next((t for t in self.trades if t.trade_ref == self.selected_ref), None)

    async def _mutate(self, operation: Callable, success_message: str) -> bool:
        try:
            await operation()
        except LedgerError as e:
            self.toast(str(e), "error")
            return False
        self.toast(success_message, "success")
        await self.reload()
        return True

    def action_book(self) -> None:
        def on_close(data: Optional[dict]):
            if data is not None:
                self.run_worker(self._book(data), exclusive=True)
        self.push_screen(TradeFormScreen(), on_close)

    async def _book(self, data: dict):
        created = {}

        async def book():
            created['trade'] = await self.api.book_trade(data)

        if await self._mutate(book, "Trade registrado"):
            self.selected_ref = created['trade'].trade_ref
            self.refresh_view()

    def action_amend(self) -> None:
        trade = self._selected_trade()
        if trade is None:
            return
        if trade.status != TradeStatus.LIVE:
            self.toast(f"{trade.trade_ref} está {trade.status.value}: amend indisponível", "warning")
            return

        def on_close(data: Optional[dict]):
            if data is not None:
                self.run_worker(
                    self._mutate(lambda: self.api.amend_trade(trade.trade_ref, data), f"{trade.trade_ref} alterado"),
                    exclusive=True
                )
        self.push_screen(TradeFormScreen(trade), on_close)

    async def action_verify(self) -> None:
        await self._transition(TradeStatus.VERIFIED)

    async def action_cancel_trade(self) -> None:
        await self._transition(TradeStatus.CANCELLED)

    async def _transition(self, target: TradeStatus):
        trade = self._selected_trade()
        if trade is None:
            return
        if trade.status != TradeStatus.LIVE:
            self.toast(f"{trade.trade_ref} já está {trade.status.value}", "warning")
            return
        await self._mutate(
            lambda: self.api.update_trade_status(trade.trade_ref, target),
            f"{trade.trade_ref} -> {target.value}"
        )

    def action_cycle_filter(self) -> None:
        self.view_state.cycle_status_filter()
        self.refresh_view()

    async def action_export(self) -> None:
        trades = await self.api.fetch_trades()
        try:
            path = self.exporter.export(trades, self.export_path)
        except OSError as e:
            self.toast(f"Falha ao exportar CSV: {e}", "error")
            return
        self.toast(f"CSV exportado para {path}", "success")

    async def action_refresh(self) -> None:
        await self.reload()

    def action_focus_search(self) -> None:
        self.query_one("#search", Input).focus()

    def action_focus_table(self) -> None:
        self.query_one("#trades-table", DataTable).focus()
