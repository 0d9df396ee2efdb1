"""Trading value objects."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, ClassVar, List, Optional, Tuple
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from ....shared.kernel.schema import CamelModel


class TradeType(str, Enum):
    STOCK = "stock"
    FOREX = "forex"
    CRYPTO = "crypto"
    OPTIONS = "options"
    FUTURES = "futures"


class TradeDirection(str, Enum):
    LONG = "long"
    SHORT = "short"


class TradeStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    CANCELLED = "cancelled"


# Matches the Numeric(20, 8) price and quantity columns.
Amount = Annotated[Decimal, Field(max_digits=20, decimal_places=8)]

# Fields that feed profit_loss / profit_loss_percent.
PNL_DEPENDENCIES = frozenset(
    {"entry_price", "exit_price", "direction", "quantity", "fees", "status"}
)


class TradeDraft(CamelModel):
    """Everything a user submits to record a new trade."""

    symbol: str = Field(..., min_length=1, max_length=20)
    type: TradeType
    direction: TradeDirection
    entry_price: Amount = Field(..., gt=0)
    exit_price: Optional[Amount] = Field(None, gt=0)
    quantity: Amount = Field(..., gt=0)
    fees: Amount = Field(Decimal("0"), ge=0)
    stop_loss: Optional[Amount] = None
    take_profit: Optional[Amount] = None
    entry_date: datetime
    exit_date: Optional[datetime] = None
    status: TradeStatus = TradeStatus.OPEN
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    screenshots: List[str] = Field(default_factory=list)
    strategy_id: Optional[UUID] = None

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return v.upper()


class TradePatch(CamelModel):
    """Partial update. Only fields the caller actually sent are applied.

    ``model_fields_set`` distinguishes "absent" from "explicitly null".
    """

    symbol: Optional[str] = Field(None, min_length=1, max_length=20)
    type: Optional[TradeType] = None
    direction: Optional[TradeDirection] = None
    entry_price: Optional[Amount] = Field(None, gt=0)
    exit_price: Optional[Amount] = Field(None, gt=0)
    quantity: Optional[Amount] = Field(None, gt=0)
    fees: Optional[Amount] = Field(None, ge=0)
    stop_loss: Optional[Amount] = None
    take_profit: Optional[Amount] = None
    entry_date: Optional[datetime] = None
    exit_date: Optional[datetime] = None
    status: Optional[TradeStatus] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    screenshots: Optional[List[str]] = None
    strategy_id: Optional[UUID] = None

    NON_NULLABLE: ClassVar[Tuple[str, ...]] = (
        "symbol", "type", "direction", "entry_price", "quantity",
        "fees", "entry_date", "status", "tags", "screenshots",
    )

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v is not None else v

    @model_validator(mode="after")
    def reject_nulled_required_fields(self) -> "TradePatch":
        for name in self.NON_NULLABLE:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Field name to new value, for sent fields only."""
        return {name: getattr(self, name) for name in self.model_fields_set}

    @property
    def touches_profit_loss(self) -> bool:
        return bool(PNL_DEPENDENCIES & self.model_fields_set)


class TradeFilters(CamelModel):
    status: Optional[TradeStatus] = None
    symbol: Optional[str] = None
    type: Optional[TradeType] = None

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else None
