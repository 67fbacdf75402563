#Description: Order workflow for one inbound signal: authenticate, persist, notify, execute, record, report.
import hmac
import json

from pydantic import ValidationError

from models.schemas import CloseOrder, OrderInput, WebhookOutcome, WebhookSignal
from utils.errors import AuthError, EncodingError, TransportError, VenueAPIError, VenueResponseError
from utils.logging import logger

DEFAULT_ORDER_TYPE = "market"


class OrderOrchestrator:
    """Relays one webhook signal to the store, the notifier and Kraken.

    Stateless between calls; any collaborator may be None, in which case its
    step is skipped. After authentication every step absorbs its own errors so
    the later steps still run with whatever is left (signal id 0, no txid).
    """

    def __init__(self, webhook_token: str | None, venue=None, store=None, notifier=None,
                 chat_id: str | None = None, live: bool = False):
        self._token = webhook_token or ""
        self.venue = venue
        self.store = store
        self.notifier = notifier
        self.chat_id = chat_id
        self.live = live

    def handle(self, payload: dict) -> WebhookOutcome:
        if not isinstance(payload, dict):
            raise EncodingError("webhook body must be a JSON object")
        try:
            signal = WebhookSignal.model_validate(payload)
        except ValidationError as e:
            raise EncodingError(f"invalid webhook body: {e}") from e
        self._authenticate(signal.token)

        signal_id = self._persist_signal(signal, payload)
        self._notify(self._received_message(signal))

        outcome = self._execute(signal, signal_id)

        self._notify(outcome.message)
        return outcome

    def _authenticate(self, supplied: str):
        # An unset token rejects everything rather than accepting everything.
        if not self._token or not hmac.compare_digest(supplied.encode(), self._token.encode()):
            logger.warning("Rejected webhook: invalid token")
            raise AuthError("invalid token")

    def _persist_signal(self, signal: WebhookSignal, payload: dict) -> int:
        if self.store is None:
            return 0
        stored = {k: v for k, v in payload.items() if k != "token"}
        try:
            signal_id = self.store.save_signal(signal.pair, signal.type, json.dumps(stored, default=str))
            logger.info(f"Signal {signal_id} stored ({signal.type} {signal.pair})")
            return signal_id
        except Exception as e:
            logger.exception(f"Failed to store signal: {e}")
            return 0

    def _notify(self, text: str):
        if self.notifier is None or not self.chat_id:
            return
        try:
            self.notifier.send(text, self.chat_id)
        except Exception as e:
            logger.exception(f"Notification failed: {e}")

    def _execute(self, signal: WebhookSignal, signal_id: int) -> WebhookOutcome:
        if self.venue is None:
            return WebhookOutcome(signal_id=signal_id, status="skipped",
                                  message="No order placed: Kraken integration disabled.")
        missing = [f for f in ("pair", "type", "volume") if not getattr(signal, f)]
        if missing:
            return WebhookOutcome(signal_id=signal_id, status="skipped",
                                  message=f"No order placed: missing {', '.join(missing)}.")

        order = self.build_order(signal)
        # One attempt only: a failed call may still have reached the venue.
        try:
            receipt = self.venue.add_order(order)
        except VenueAPIError as e:
            logger.warning(f"Kraken rejected order for signal {signal_id}: {e}")
            return WebhookOutcome(signal_id=signal_id, status="rejected",
                                  message=f"❌ Order rejected by Kraken: {e}")
        except TransportError as e:
            if e.outcome_unknown:
                logger.error(f"Order outcome unknown for signal {signal_id}: {e}")
                return self._unknown_outcome(signal_id, order, e)
            logger.error(f"Order failed for signal {signal_id}: {e}")
            return WebhookOutcome(signal_id=signal_id, status="failed", message=f"❌ Order failed: {e}")
        except VenueResponseError as e:
            # 2xx from Kraken but unreadable, so the order may well exist.
            logger.error(f"Unreadable AddOrder response for signal {signal_id}: {e}")
            return self._unknown_outcome(signal_id, order, e)
        except Exception as e:
            logger.exception(f"Order failed for signal {signal_id}: {e}")
            return WebhookOutcome(signal_id=signal_id, status="failed", message=f"❌ Order failed: {e}")

        txid = receipt.first_txid
        self._persist_trade(signal_id, order, txid)

        status = "validated" if order.validate_only else "placed"
        lines = [f"✅ Order {'validated (not executed)' if order.validate_only else 'placed'}",
                 f"Order: {receipt.descr.order}"]
        if receipt.descr.close:
            lines.append(f"Close: {receipt.descr.close}")
        if txid:
            lines.append(f"TxID: {', '.join(receipt.txid)}")
        return WebhookOutcome(signal_id=signal_id, status=status, txid=txid, message="\n".join(lines))

    def build_order(self, signal: WebhookSignal) -> OrderInput:
        close = None
        if signal.close_ordertype:
            close = CloseOrder(ordertype=signal.close_ordertype, price=signal.close_price,
                               price2=signal.close_price2)
        return OrderInput(
            pair=signal.pair,
            type=signal.type,
            ordertype=signal.ordertype or DEFAULT_ORDER_TYPE,
            volume=signal.volume,
            price=signal.price,
            price2=signal.price2,
            validate_only=not self.live,
            close=close,
        )

    def _persist_trade(self, signal_id: int, order: OrderInput, txid: str):
        if self.store is None or not signal_id or not txid:
            return
        try:
            trade_id = self.store.save_trade(signal_id, order.pair, order.type, order.ordertype,
                                             order.volume, order.price, txid)
            logger.info(f"Trade {trade_id} stored for signal {signal_id} (txid {txid})")
        except Exception as e:
            logger.exception(f"Failed to store trade {txid}: {e}")

    @staticmethod
    def _unknown_outcome(signal_id: int, order: OrderInput, error: Exception) -> WebhookOutcome:
        return WebhookOutcome(
            signal_id=signal_id, status="unknown",
            message=(f"⚠️ Order outcome unknown ({order.type} {order.volume} {order.pair}): {error}. "
                     "Check open orders on Kraken before resending."))

    @staticmethod
    def _received_message(signal: WebhookSignal) -> str:
        lines = ["📈 Signal received"]
        for label, value in (("Pair", signal.pair), ("Type", signal.type), ("Order type", signal.ordertype),
                             ("Volume", signal.volume), ("Price", signal.price)):
            if value:
                lines.append(f"{label}: {value}")
        if signal.text:
            lines.append(signal.text)
        return "\n".join(lines)
