"""Trading domain database models."""

from sqlalchemy import JSON, Column, ForeignKey, Index, Numeric, String, Text, Uuid

from ....infrastructure.persistence.database import Base, UTCDateTime
from ....shared.utils.time import utcnow


class TradeModel(Base):
    """Trade database model."""

    __tablename__ = "trades"

    id = Column(Uuid, primary_key=True)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Instrument
    symbol = Column(String(20), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # stock, forex, crypto, options, futures
    direction = Column(String(10), nullable=False)  # long, short

    # Pricing
    entry_price = Column(Numeric(20, 8), nullable=False)
    exit_price = Column(Numeric(20, 8), nullable=True)
    quantity = Column(Numeric(20, 8), nullable=False)
    fees = Column(Numeric(20, 8), nullable=False, default=0)
    stop_loss = Column(Numeric(20, 8), nullable=True)
    take_profit = Column(Numeric(20, 8), nullable=True)

    # Timing and lifecycle
    entry_date = Column(UTCDateTime, nullable=False)
    exit_date = Column(UTCDateTime, nullable=True)
    status = Column(String(20), nullable=False, default="open", index=True)

    # Derived at write time
    profit_loss = Column(Numeric(20, 2), nullable=True)
    profit_loss_percent = Column(Numeric(20, 2), nullable=True)

    notes = Column(Text, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    screenshots = Column(JSON, nullable=False, default=list)
    strategy_id = Column(Uuid, nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_trades_user_id_entry_date", "user_id", "entry_date"),
    )

    def __repr__(self) -> str:
        return f"<TradeModel(id={self.id}, symbol={self.symbol}, status={self.status})>"
