#Description: Kraken spot adapter with connectivity test, balances and order placement.

from adapters.kraken_common import KrakenBaseAdapter, PRIVATE_PREFIX, PUBLIC_PREFIX
from models.schemas import AddOrderReceipt, OrderInput, ServerTime, TradeBalance
from utils.logging import logger

OPTIONAL_ORDER_FIELDS = ("price", "price2", "userref", "oflags", "timeinforce")
CLOSE_FIELDS = ("ordertype", "price", "price2")

def build_order_params(order: OrderInput) -> dict[str, str]:
    """Form fields for AddOrder. Empty optional fields are left out, not sent blank."""
    params = {
        "pair": order.pair,
        "type": order.type,
        "ordertype": order.ordertype,
        "volume": order.volume,
    }
    for field in OPTIONAL_ORDER_FIELDS:
        value = getattr(order, field)
        if value:
            params[field] = value
    if order.validate_only:
        params["validate"] = "true"
    if order.close is not None:
        for field in CLOSE_FIELDS:
            value = getattr(order.close, field)
            if value:
                params[f"close[{field}]"] = value
    return params

class KrakenSpotAdapter(KrakenBaseAdapter):

    def test_connectivity(self):
        try:
            t = self.server_time()
            return True, f"Server time: {t.rfc1123 or t.unixtime}"
        except Exception as e:
            return False, f"Connectivity failed: {e}"

    def server_time(self) -> ServerTime:
        raw = self.get_public(PUBLIC_PREFIX + "Time")
        return self.unwrap(raw, ServerTime)

    def get_balance(self) -> dict:
        raw = self._send_signed("POST", PRIVATE_PREFIX + "Balance")
        return self.unwrap(raw, dict)

    def get_trade_balance(self, asset: str = "") -> TradeBalance:
        params = {"asset": asset} if asset else {}
        raw = self._send_signed("POST", PRIVATE_PREFIX + "TradeBalance", params)
        return self.unwrap(raw, TradeBalance)

    def add_order(self, order: OrderInput) -> AddOrderReceipt:
        params = build_order_params(order)
        logger.info(f"AddOrder {order.type} {order.volume} {order.pair} ({order.ordertype})"
                    f"{' [validate]' if order.validate_only else ''}")
        raw = self._send_signed("POST", PRIVATE_PREFIX + "AddOrder", params)
        return self.unwrap(raw, AddOrderReceipt)
