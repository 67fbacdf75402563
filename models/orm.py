#Description: ORM entity definitions for received signals and resulting trades.

from sqlalchemy.orm import declarative_base, Mapped, mapped_column
from sqlalchemy import Integer, String, Float, DateTime, Text, ForeignKey
from datetime import datetime, timezone

Base = declarative_base()

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class Signal(Base):
    __tablename__ = "signals"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    received_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, index=True)
    pair: Mapped[str] = mapped_column(String, default="")
    type: Mapped[str] = mapped_column(String, default="")  # buy/sell or free text
    payload: Mapped[str] = mapped_column(Text, default="")

class Trade(Base):
    __tablename__ = "trades"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    signal_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("signals.id"), nullable=True)
    pair: Mapped[str] = mapped_column(String, default="")
    type: Mapped[str] = mapped_column(String, default="")
    ordertype: Mapped[str] = mapped_column(String, default="")
    volume: Mapped[str] = mapped_column(String, default="")
    price: Mapped[str] = mapped_column(String, default="")
    txid: Mapped[str] = mapped_column(String, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, index=True)
    status: Mapped[str] = mapped_column(String, default="open", server_default="open")
    # Filled by a future reconciliation job, never computed here.
    pnl: Mapped[float] = mapped_column(Float, default=0.0, server_default="0")
