import json

import httpx
import pytest

from domain.notification.entity import FinancialStatus, StoreAuth, StoreContext
from domain.notification.exceptions import TransportError
from infrastructure.external.store_api import (
    StoreAppConfigProvider,
    StoreOrderResolver,
    StoreOrderStatusUpdater,
    store_api_client_factory,
)


CONTEXT = StoreContext(store_id=1001, auth=StoreAuth(store_id=1001, my_id="my-1", access_token="at-1"))


def _factory(handler, requests: list):
    def _record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return store_api_client_factory(httpx.AsyncClient(transport=httpx.MockTransport(_record)))


@pytest.mark.asyncio
async def test_config_merges_hidden_data():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/hidden_data.json"):
            return httpx.Response(200, json={"paghiper_api_key": "K1", "paghiper_token": "TOK"})
        return httpx.Response(200, json={"_id": "app-test", "data": {"label": "Boleto PagHiper"}})

    provider = StoreAppConfigProvider(_factory(handler, requests))
    config = await provider.get_config(CONTEXT, include_hidden=True)

    assert config.paghiper_api_key == "K1"
    assert config.paghiper_token == "TOK"
    assert config.label == "Boleto PagHiper"
    assert [r.url.path for r in requests] == [
        "/v1/applications/app-test.json",
        "/v1/applications/app-test/hidden_data.json",
    ]
    assert requests[0].headers["X-Store-ID"] == "1001"
    assert requests[0].headers["X-My-ID"] == "my-1"
    assert requests[0].headers["X-Access-Token"] == "at-1"


@pytest.mark.asyncio
async def test_config_without_hidden_data():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"paghiper_api_key": "public"}})

    config = await StoreAppConfigProvider(_factory(handler, requests)).get_config(CONTEXT)

    assert config.paghiper_api_key == "public"
    assert config.paghiper_token is None
    assert len(requests) == 1


@pytest.mark.asyncio
async def test_orders_listed_by_transaction_and_intermediator():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"result": [{"_id": "O1"}, {"_id": "O2", "number": 12}]})

    orders = await StoreOrderResolver(_factory(handler, requests)).list_orders_by_transaction(
        CONTEXT, "T1", "paghiper"
    )

    assert [o.id for o in orders] == ["O1", "O2"]
    params = requests[0].url.params
    assert params["transactions.intermediator.transaction_code"] == "T1"
    assert params["transactions.app.intermediator.code"] == "paghiper"


@pytest.mark.asyncio
async def test_no_orders_is_empty_list():
    requests = []
    resolver = StoreOrderResolver(_factory(lambda r: httpx.Response(200, json={"result": []}), requests))

    assert await resolver.list_orders_by_transaction(CONTEXT, "T1") == []
    assert "transactions.app.intermediator.code" not in requests[0].url.params


@pytest.mark.asyncio
async def test_payment_status_appended_to_history():
    requests = []
    updater = StoreOrderStatusUpdater(_factory(lambda r: httpx.Response(201, json={"_id": "h1"}), requests))

    await updater.update_payment_status(CONTEXT, "O1", FinancialStatus.PAID, "N1")

    request = requests[0]
    assert request.method == "POST"
    assert request.url.path == "/v1/orders/O1/payments_history.json"
    body = json.loads(request.content)
    assert body["status"] == "paid"
    assert body["notification_code"] == "N1"
    assert body["flags"] == ["paghiper"]
    assert body["date_time"].endswith("Z")


@pytest.mark.asyncio
async def test_update_failure_is_transport_error():
    requests = []
    updater = StoreOrderStatusUpdater(
        _factory(lambda r: httpx.Response(404, json={"message": "Resource not found"}), requests)
    )

    with pytest.raises(TransportError) as exc_info:
        await updater.update_payment_status(CONTEXT, "O9", FinancialStatus.VOIDED, None)

    assert exc_info.value.status_code == 404
    assert exc_info.value.endpoint.endswith("/orders/O9/payments_history.json")
    assert "notification_code" not in json.loads(requests[0].content)
