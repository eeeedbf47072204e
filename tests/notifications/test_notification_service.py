import pytest

from application.dtos.notifications import NOTIFICATION_ERROR
from domain.notification.entity import FinancialStatus, NotificationState
from domain.notification.exceptions import (
    LookupMissError,
    RequestInfo,
    ResponseInfo,
    TransportError,
)

from .conftest import FakeProcessor, FakeReceipts, FakeTransactions, FakeOrders, FakeOrderStatus, FakeMerchantConfig


@pytest.mark.asyncio
async def test_reserved_status_updates_every_order_as_authorized(stack, payload):
    outcome = await stack.service().handle(payload)

    assert outcome.status_code == 204
    assert outcome.body is None
    assert outcome.state is NotificationState.DONE

    assert stack.transactions.calls == ["T1"]
    assert stack.store_auth.calls == [1001]
    context, include_hidden = stack.merchant_config.calls[0]
    assert include_hidden is True
    assert context.store_id == 1001

    forwarded, token = stack.processor.calls[0]
    assert token == "TOK"
    assert forwarded.forward_body(token) == {
        "transaction_id": "T1",
        "apiKey": "K1",
        "notification_id": "N1",
        "token": "TOK",
    }

    assert stack.orders.calls[0][1:] == ("T1", "paghiper")
    assert sorted(stack.order_status.calls) == [
        ("O1", FinancialStatus.AUTHORIZED, "N1"),
        ("O2", FinancialStatus.AUTHORIZED, "N1"),
    ]


@pytest.mark.asyncio
async def test_wrong_api_key_is_rejected_before_reading_processor(stack, payload):
    payload["apiKey"] = "WRONG"

    outcome = await stack.service().handle(payload)

    assert outcome.status_code == 409
    assert outcome.body == {"error": NOTIFICATION_ERROR, "message": "API key does not match"}
    assert stack.processor.calls == []
    assert stack.orders.calls == []
    assert stack.order_status.calls == []


@pytest.mark.asyncio
async def test_missing_token_is_a_conflict(stack, payload):
    stack.merchant_config = FakeMerchantConfig({"paghiper_api_key": "K1"})

    outcome = await stack.service().handle(payload)

    assert outcome.status_code == 409
    assert outcome.body["error"] == NOTIFICATION_ERROR
    assert stack.processor.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"apiKey": "K1"}, {"transaction_id": ""}, None, ["T1"], "T1"])
async def test_missing_transaction_id_is_bad_request_without_calls(stack, body):
    outcome = await stack.service().handle(body)

    assert outcome.status_code == 400
    assert outcome.body is None
    assert outcome.state is NotificationState.REJECTED_BAD_REQUEST
    assert stack.transactions.calls == []
    assert stack.store_auth.calls == []
    assert stack.processor.calls == []


@pytest.mark.asyncio
async def test_unknown_transaction_is_a_conflict(stack, payload):
    stack.transactions = FakeTransactions({})

    outcome = await stack.service().handle(payload)

    assert outcome.status_code == 409
    assert outcome.body["message"] == "Transaction T1 not found"
    assert stack.store_auth.calls == []
    assert stack.processor.calls == []


@pytest.mark.asyncio
async def test_no_orders_is_success(stack, payload):
    stack.orders = FakeOrders([])

    outcome = await stack.service().handle(payload)

    assert outcome.status_code == 204
    assert stack.order_status.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["expired", "Paid", "", None])
async def test_unknown_status_is_skipped(stack, payload, status):
    stack.processor = FakeProcessor(status=status)

    outcome = await stack.service().handle(payload)

    assert outcome.status_code == 204
    assert stack.orders.calls == []
    assert stack.order_status.calls == []


@pytest.mark.asyncio
async def test_partial_update_failure_is_a_conflict(stack, payload):
    stack.orders = FakeOrders(["O1", "O2", "O3"])
    stack.order_status = FakeOrderStatus(failing={"O2"})

    outcome = await stack.service().handle(payload)

    assert outcome.status_code == 409
    assert outcome.body["message"].startswith("1 of 3 order updates failed")
    # Updates already applied stay applied
    assert sorted(stack.order_status.applied) == ["O1", "O3"]
    assert len(stack.order_status.calls) == 3


@pytest.mark.asyncio
async def test_processor_transport_error_is_operational(stack, payload):
    stack.processor = FakeProcessor(
        error=TransportError(
            "Service unavailable",
            request=RequestInfo(method="POST", url="https://paghiper.test/transaction/notification/"),
            response=ResponseInfo(status_code=503, body="Service unavailable"),
        )
    )

    outcome = await stack.service().handle(payload)

    assert outcome.status_code == 500
    assert outcome.body == {"error": NOTIFICATION_ERROR, "message": "Service unavailable"}
    assert stack.orders.calls == []


@pytest.mark.asyncio
async def test_unexpected_error_is_operational(stack, payload):
    stack.orders = FakeOrders(["O1"], error=ValueError("boom"))

    outcome = await stack.service().handle(payload)

    assert outcome.status_code == 500
    assert outcome.body["message"] == "boom"
    assert stack.order_status.calls == []


@pytest.mark.asyncio
async def test_lookup_miss_from_order_resolver_is_a_conflict(stack, payload):
    stack.orders = FakeOrders(["O1"], error=LookupMissError("No orders", reason="EMPTY", endpoint="/orders.json"))

    outcome = await stack.service().handle(payload)

    assert outcome.status_code == 409


@pytest.mark.asyncio
async def test_numeric_ids_are_accepted(stack):
    stack.transactions = FakeTransactions({"123": 7})

    outcome = await stack.service().handle({"transaction_id": 123, "apiKey": "K1", "notification_id": 9})

    assert outcome.status_code == 204
    assert stack.transactions.calls == ["123"]
    assert {call[2] for call in stack.order_status.calls} == {"9"}


@pytest.mark.asyncio
async def test_processed_notification_is_remembered_and_replay_ignored(stack, payload):
    stack.receipts = FakeReceipts()
    service = stack.service()

    first = await service.handle(payload)
    second = await service.handle(payload)

    assert first.status_code == 204
    assert second.status_code == 204
    assert stack.receipts.marked == [("T1", "N1")]
    assert len(stack.processor.calls) == 1
    assert len(stack.order_status.calls) == 2


@pytest.mark.asyncio
async def test_rejected_notification_is_not_remembered(stack, payload):
    stack.receipts = FakeReceipts()
    payload["apiKey"] = "WRONG"

    outcome = await stack.service().handle(payload)

    assert outcome.status_code == 409
    assert stack.receipts.marked == []


@pytest.mark.asyncio
async def test_receipt_backend_failure_does_not_block_processing(stack, payload):
    class BrokenReceipts(FakeReceipts):
        async def is_processed(self, transaction_code, notification_id):
            raise ConnectionError("redis down")

        async def mark_processed(self, transaction_code, notification_id):
            raise ConnectionError("redis down")

    stack.receipts = BrokenReceipts()

    outcome = await stack.service().handle(payload)

    assert outcome.status_code == 204
    assert len(stack.order_status.calls) == 2


@pytest.mark.asyncio
async def test_missing_api_keys_are_rejected_even_with_token(stack):
    stack.merchant_config = FakeMerchantConfig({"paghiper_token": "TOK"})

    outcome = await stack.service().handle({"transaction_id": "T1", "notification_id": "N1"})

    assert outcome.status_code == 409
    assert outcome.body == {"error": NOTIFICATION_ERROR, "message": "API key is missing"}
    assert stack.processor.calls == []
    assert stack.order_status.calls == []


@pytest.mark.asyncio
async def test_missing_payload_api_key_is_rejected(stack):
    outcome = await stack.service().handle({"transaction_id": "T1", "notification_id": "N1"})

    assert outcome.status_code == 409
    assert stack.processor.calls == []


@pytest.mark.asyncio
async def test_replay_with_wrong_api_key_is_rejected(stack, payload):
    stack.receipts = FakeReceipts()
    service = stack.service()

    first = await service.handle(payload)
    replay = await service.handle(dict(payload, apiKey="WRONG"))

    assert first.status_code == 204
    assert replay.status_code == 409
    assert replay.body["message"] == "API key does not match"
    assert len(stack.processor.calls) == 1


@pytest.mark.asyncio
async def test_rejections_are_logged_with_error_kind(stack, payload, monkeypatch):
    import application.services.notification_service as notification_service

    class RecordingLogger:
        def __init__(self):
            self.events = []

        def _record(self, event, **fields):
            self.events.append((event, fields))

        info = error = warning = debug = _record

    recorder = RecordingLogger()
    monkeypatch.setattr(notification_service, "logger", recorder)
    payload["apiKey"] = "WRONG"

    await stack.service().handle(payload)

    conflicts = [fields for event, fields in recorder.events if event == "notification_conflict"]
    assert conflicts[0]["kind"] == "invalid_client"
    assert conflicts[0]["endpoint"] == "merchant_config"
    assert conflicts[0]["store_id"] == 1001
