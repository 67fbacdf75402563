#Description: Kraken adapter: AddOrder form fields, signing headers, envelope decoding and transport errors.

from urllib.parse import parse_qs

import httpx
import pytest

from adapters.kraken_spot import KrakenSpotAdapter, build_order_params
from models.schemas import CloseOrder, OrderInput, TradeBalance
from utils.errors import TransportError, VenueAPIError, VenueResponseError
from utils.security import decode_secret, sign_request

from conftest import API_KEY, API_SECRET, envelope

RECEIPT = {"descr": {"order": "buy 1.25000000 XBTUSD @ limit 37500.0"}, "txid": ["OABC-123"]}


def form(request: httpx.Request) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(request.content.decode(), keep_blank_values=True).items()}


def test_mandatory_fields_always_sent():
    params = build_order_params(OrderInput(pair="XBTUSD", type="buy", volume="1.25"))
    assert params == {"pair": "XBTUSD", "type": "buy", "ordertype": "market", "volume": "1.25"}


def test_empty_price_is_omitted():
    params = build_order_params(OrderInput(pair="XBTUSD", type="buy", ordertype="limit", volume="1", price=""))
    assert "price" not in params
    assert "price2" not in params


def test_optional_fields_sent_when_set():
    order = OrderInput(pair="XBTUSD", type="sell", ordertype="stop-loss-limit", volume="2", price="30000",
                       price2="29900", userref="7", oflags="post", timeinforce="GTC", validate_only=True)
    params = build_order_params(order)
    assert params["price"] == "30000"
    assert params["price2"] == "29900"
    assert params["userref"] == "7"
    assert params["oflags"] == "post"
    assert params["timeinforce"] == "GTC"
    assert params["validate"] == "true"


def test_validate_not_sent_when_false():
    params = build_order_params(OrderInput(pair="XBTUSD", type="buy", volume="1"))
    assert "validate" not in params


def test_close_with_only_ordertype():
    order = OrderInput(pair="XBTUSD", type="buy", volume="1", close=CloseOrder(ordertype="limit"))
    close_keys = {k: v for k, v in build_order_params(order).items() if k.startswith("close[")}
    assert close_keys == {"close[ordertype]": "limit"}


def test_close_fields_flattened():
    order = OrderInput(pair="XBTUSD", type="buy", volume="1",
                       close=CloseOrder(ordertype="stop-loss-limit", price="30000", price2="29000"))
    params = build_order_params(order)
    assert params["close[ordertype]"] == "stop-loss-limit"
    assert params["close[price]"] == "30000"
    assert params["close[price2]"] == "29000"


def test_add_order_signs_with_the_transmitted_nonce(kraken_factory):
    adapter, transport = kraken_factory(lambda request: envelope(RECEIPT))

    receipt = adapter.add_order(OrderInput(pair="XBTUSD", type="buy", ordertype="limit", volume="1.25",
                                           price="37500", close=CloseOrder(ordertype="limit")))

    assert receipt.txid == ["OABC-123"]
    assert receipt.first_txid == "OABC-123"
    request = transport.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/0/private/AddOrder"
    assert request.headers["API-Key"] == API_KEY
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    body = request.content.decode()
    fields = form(request)
    assert fields["nonce"] == "1000"
    assert fields["close[ordertype]"] == "limit"
    assert "close[price]" not in fields
    expected = sign_request(decode_secret(API_SECRET), "/0/private/AddOrder", fields["nonce"], body)
    assert request.headers["API-Sign"] == expected


def test_each_request_gets_a_fresh_nonce(kraken_factory):
    adapter, transport = kraken_factory(lambda request: envelope({"XXBT": "0.5"}))
    adapter.get_balance()
    adapter.get_balance()
    nonces = [int(form(r)["nonce"]) for r in transport.requests]
    assert nonces[0] < nonces[1]


def test_venue_errors_are_aggregated(kraken_factory):
    adapter, _ = kraken_factory(lambda request: envelope(
        RECEIPT, error=["EOrder:Insufficient funds", "EGeneral:Invalid arguments"]))
    with pytest.raises(VenueAPIError) as exc:
        adapter.add_order(OrderInput(pair="XBTUSD", type="buy", volume="1"))
    assert exc.value.messages == ["EOrder:Insufficient funds", "EGeneral:Invalid arguments"]
    assert str(exc.value) == "EOrder:Insufficient funds; EGeneral:Invalid arguments"


def test_success_without_result_is_an_error(kraken_factory):
    adapter, _ = kraken_factory(lambda request: envelope())
    with pytest.raises(VenueResponseError):
        adapter.add_order(OrderInput(pair="XBTUSD", type="buy", volume="1"))


def test_malformed_json_is_an_error(kraken_factory):
    adapter, _ = kraken_factory(lambda request: httpx.Response(200, content=b"<html>oops</html>"))
    with pytest.raises(VenueResponseError):
        adapter.get_balance()


def test_non_2xx_is_a_transport_error_with_body(kraken_factory):
    adapter, _ = kraken_factory(lambda request: httpx.Response(502, content=b"bad gateway"))
    with pytest.raises(TransportError) as exc:
        adapter.add_order(OrderInput(pair="XBTUSD", type="buy", volume="1"))
    assert exc.value.status_code == 502
    assert exc.value.body == b"bad gateway"
    assert not exc.value.outcome_unknown


def test_read_timeout_leaves_outcome_unknown(kraken_factory):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    adapter, _ = kraken_factory(handler)
    with pytest.raises(TransportError) as exc:
        adapter.add_order(OrderInput(pair="XBTUSD", type="buy", volume="1"))
    assert exc.value.outcome_unknown


def test_connect_error_is_a_plain_failure(kraken_factory):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    adapter, _ = kraken_factory(handler)
    with pytest.raises(TransportError) as exc:
        adapter.get_balance()
    assert not exc.value.outcome_unknown


def test_get_balance(kraken_factory):
    adapter, transport = kraken_factory(lambda request: envelope({"ZUSD": "100.0", "XXBT": "0.5"}))
    assert adapter.get_balance() == {"ZUSD": "100.0", "XXBT": "0.5"}
    assert transport.requests[0].url.path == "/0/private/Balance"


def test_get_trade_balance_with_asset(kraken_factory):
    adapter, transport = kraken_factory(lambda request: envelope({"eb": "1000.0", "tb": "900.0", "e": "950.0"}))
    tb = adapter.get_trade_balance("ZUSD")
    assert isinstance(tb, TradeBalance)
    assert tb.eb == "1000.0"
    assert tb.mf == ""
    assert form(transport.requests[0])["asset"] == "ZUSD"


def test_trade_balance_without_asset_sends_only_nonce(kraken_factory):
    adapter, transport = kraken_factory(lambda request: envelope({"eb": "1"}))
    adapter.get_trade_balance()
    assert set(form(transport.requests[0])) == {"nonce"}


def test_connectivity_uses_public_time(kraken_factory):
    adapter, transport = kraken_factory(
        lambda request: envelope({"unixtime": 1616492376, "rfc1123": "Tue, 23 Mar 21 09:39:36 +0000"}))
    ok, msg = adapter.test_connectivity()
    assert ok
    assert "23 Mar 21" in msg
    request = transport.requests[0]
    assert request.url.path == "/0/public/Time"
    assert "API-Sign" not in request.headers


def test_connectivity_failure_is_reported(kraken_factory):
    adapter, _ = kraken_factory(lambda request: httpx.Response(503, content=b""))
    ok, msg = adapter.test_connectivity()
    assert not ok
    assert "Connectivity failed" in msg


def test_invalid_secret_rejected_at_construction():
    with pytest.raises(ValueError):
        KrakenSpotAdapter(API_KEY, "%%% not base64 %%%")


def test_private_prefix_enforced(kraken_factory):
    adapter, transport = kraken_factory(lambda request: envelope({}))
    with pytest.raises(ValueError):
        adapter._send_signed("POST", "/0/public/Time")
    assert transport.requests == []
