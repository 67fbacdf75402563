#Description: Signal/trade store: serialized writes, capped recent-row reads, DataFrame helpers.
import json
from threading import Lock

import pandas as pd
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from models.db import make_session_factory, init_db
from models.orm import Signal, Trade
from models.schemas import SignalOut, TradeOut
from utils.errors import PersistenceError

DEFAULT_LIMIT = 50

class SignalStore:
    def __init__(self, engine, create_tables: bool = True):
        self.engine = engine
        self.Session = make_session_factory(engine)
        self._write_lock = Lock()
        if create_tables:
            init_db(engine)

    def close(self):
        self.Session.remove()
        self.engine.dispose()

    def save_signal(self, pair: str, type: str, payload) -> int:
        if not isinstance(payload, str):
            payload = json.dumps(payload, default=str)
        return self._insert(Signal(pair=pair or "", type=type or "", payload=payload))

    def save_trade(self, signal_id: int, pair: str, type: str, ordertype: str, volume: str,
                   price: str, txid: str) -> int:
        return self._insert(Trade(signal_id=signal_id or None, pair=pair, type=type, ordertype=ordertype,
                                  volume=volume, price=price, txid=txid))

    def _insert(self, row) -> int:
        with self._write_lock:
            s = self.Session()
            try:
                s.add(row)
                s.commit()
                return row.id
            except SQLAlchemyError as e:
                s.rollback()
                raise PersistenceError(f"insert into {row.__tablename__} failed: {e}") from e
            finally:
                self.Session.remove()

    def get_recent_signals(self, limit: int = DEFAULT_LIMIT) -> list[SignalOut]:
        stmt = select(Signal).order_by(Signal.received_at.desc(), Signal.id.desc()).limit(max(0, limit))
        return [SignalOut.model_validate(r) for r in self._query(stmt)]

    def get_recent_trades(self, limit: int = DEFAULT_LIMIT) -> list[TradeOut]:
        stmt = select(Trade).order_by(Trade.created_at.desc(), Trade.id.desc()).limit(max(0, limit))
        return [TradeOut.model_validate(r) for r in self._query(stmt)]

    def _query(self, stmt):
        s = self.Session()
        try:
            return s.scalars(stmt).all()
        except SQLAlchemyError as e:
            raise PersistenceError(f"query failed: {e}") from e
        finally:
            self.Session.remove()

    def signals_df(self, limit: int = DEFAULT_LIMIT) -> pd.DataFrame:
        rows = [r.model_dump() for r in self.get_recent_signals(limit)]
        if not rows:
            return pd.DataFrame({c: [] for c in SignalOut.model_fields})
        return pd.DataFrame(rows)

    def trades_df(self, limit: int = DEFAULT_LIMIT) -> pd.DataFrame:
        rows = [r.model_dump() for r in self.get_recent_trades(limit)]
        if not rows:
            return pd.DataFrame({c: [] for c in TradeOut.model_fields})
        return pd.DataFrame(rows)
