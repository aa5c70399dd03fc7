import logging
import threading
from collections import defaultdict
from typing import Callable, Any, List
from application.interfaces.system_event_bus import ISystemEventBus

logger = logging.getLogger(__name__)


def _handler_name(handler: Callable) -> str:
    return getattr(handler, '__qualname__', None) or repr(handler)


class LocalEventBus(ISystemEventBus):
    """Barramento de eventos em memória. Falhas de um handler não afetam os demais."""

    def __init__(self):
        self.handlers: defaultdict[str, List[Callable]] = defaultdict(list)
        self.lock = threading.Lock()

    def subscribe(self, event_type: str, handler: Callable):
        """Inscreve um handler para um tipo de evento."""
        with self.lock:
            self.handlers[event_type].append(handler)
        logger.debug(f"Handler {_handler_name(handler)} inscrito para o evento '{event_type}'.")

    def unsubscribe(self, event_type: str, handler: Callable):
        with self.lock:
            if handler in self.handlers.get(event_type, []):
                self.handlers[event_type].remove(handler)
                logger.debug(f"Handler {_handler_name(handler)} removido do evento '{event_type}'.")

    def publish(self, event_type: str, data: Any):
        """Publica um evento, acionando todos os handlers inscritos."""
        with self.lock:
            handlers = list(self.handlers.get(event_type, []))

        if handlers:
            logger.debug(f"Publicando evento '{event_type}' com dados: {data}")
        for handler in handlers:
            try:
                handler(data)
            except Exception as e:
                logger.error(
                    f"Erro ao executar o handler {_handler_name(handler)} para o evento '{event_type}': {e}",
                    exc_info=True
                )
