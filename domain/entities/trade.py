# domain/entities/trade.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from enum import Enum
from typing import List, Optional


class TradeStatus(str, Enum):
    """Estados do ciclo de vida de um trade."""
    LIVE = "LIVE"              # Pendente, ainda mutável
    VERIFIED = "VERIFIED"      # Confirmado (terminal)
    CANCELLED = "CANCELLED"    # Anulado (terminal)

    @property
    def is_terminal(self) -> bool:
        return self is not TradeStatus.LIVE


class HistoryAction(str, Enum):
    BOOK = "BOOK"
    AMEND = "AMEND"
    VERIFIED = "VERIFIED"
    CANCELLED = "CANCELLED"
    UPDATE = "UPDATE"


class TradeHistoryEntry(BaseModel):
    """Uma entrada imutável da trilha de auditoria."""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    action: HistoryAction
    user: str
    note: str = ""


class Trade(BaseModel):
    """Representa um trade registrado no blotter, com sua trilha de auditoria (mais recente primeiro)."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    trade_ref: str = Field(alias="tradeRef", min_length=1)
    status: TradeStatus = TradeStatus.LIVE
    subject: str
    source: str
    counterparty: str
    notional: float = Field(ge=0, allow_inf_nan=False)
    updated_at: datetime = Field(alias="updatedAt")
    history: List[TradeHistoryEntry] = Field(default_factory=list)

    @field_validator("counterparty")
    @classmethod
    def _counterparty_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("counterparty não pode ser vazio")
        return value

    @property
    def is_live(self) -> bool:
        return self.status == TradeStatus.LIVE

    def to_payload(self) -> dict:
        """Forma canônica externa (camelCase) do trade."""
        return self.model_dump(mode="json", by_alias=True)


class BookingRequest(BaseModel):
    """Dados de entrada para registrar um novo trade."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    subject: str = "VANILLA_SWAPTION"
    source: str = "INTERNAL_UI"
    counterparty: str
    notional: float = Field(ge=0, allow_inf_nan=False)

    @field_validator("counterparty")
    @classmethod
    def _counterparty_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("counterparty não pode ser vazio")
        return value


class TradeAmendment(BaseModel):
    """Patch parcial: apenas os campos informados são aplicados."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    subject: Optional[str] = None
    source: Optional[str] = None
    counterparty: Optional[str] = None
    notional: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)
