# main.py
import argparse
import logging
import sys
from pathlib import Path
from rich.console import Console
from rich.logging import RichHandler

from config import settings

console = Console()


def configure_logging(log_dir: Path) -> None:
    """Arquivo em log_dir/system.log (INFO) e console via Rich (WARNING)."""
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.handlers.clear()

    file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    file_handler = logging.FileHandler(log_dir / "system.log", mode='w', encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(file_formatter)

    rich_handler = RichHandler(
        console=console,
        level=logging.WARNING,
        show_time=False,
        markup=True,
        rich_tracebacks=True
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(rich_handler)


def handle_uncaught_exception(exc_type, exc_value, exc_traceback):
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    logging.critical("EXCEÇÃO NÃO TRATADA", exc_info=(exc_type, exc_value, exc_traceback))


logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="SimpleTrade - blotter de trades em memória")
    parser.add_argument("--no-seed", action="store_true", help="Inicia o ledger vazio, sem trades de demonstração")
    parser.add_argument("--headless", action="store_true", help="Imprime o blotter no console e sai")
    parser.add_argument("--export-csv", metavar="PATH", help="Exporta o blotter em CSV e sai")
    return parser.parse_args(argv)


def main(argv=None):
    """Ponto de entrada do sistema."""
    args = parse_args(argv)

    configure_logging(Path(settings.SYSTEM_CONFIG.get('log_dir', 'logs')))
    sys.excepthook = handle_uncaught_exception

    from orchestration.blotter_system import BlotterSystem

    system = BlotterSystem(
        console=console,
        store_config=settings.STORE_CONFIG,
        api_config=settings.API_CONFIG,
        display_config=settings.DISPLAY_CONFIG,
        seed_config=settings.SEED_CONFIG,
        system_config=settings.SYSTEM_CONFIG
    )

    try:
        if not system.initialize(seed=False if args.no_seed else None):
            console.print("[bold red]❌ Falha na inicialização do blotter.[/bold red]")
            return 1

        if args.export_csv:
            path = system.export_csv(args.export_csv)
            console.print(f"[green]✓ CSV exportado para {path}[/green]")
        elif args.headless:
            system.print_blotter()
        else:
            system.run_interactive()
        return 0

    except KeyboardInterrupt:
        console.print("\n[bold]Sistema finalizado pelo usuário.[/bold]")
        return 0
    except Exception as e:
        logger.critical(f"Erro fatal não capturado no main: {e}", exc_info=True)
        console.print("[bold red]💥 Erro fatal. Verifique 'system.log'[/bold red]")
        return 1
    finally:
        system.shutdown()
        logging.shutdown()


if __name__ == "__main__":
    sys.exit(main())
