"""Tests for JSON-RPC envelopes and the ProtocolDispatcher."""

import pytest

from advanced_reason.protocol.jsonrpc import (
    HANDLER_ERROR,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    ProtocolDispatcher,
    is_notification,
    parse_error_response,
)


@pytest.fixture
def dispatcher() -> ProtocolDispatcher:
    d = ProtocolDispatcher()
    d.register("echo", lambda params: params)

    async def slow_echo(params):
        return {"async": params}

    def explode(params):
        raise RuntimeError("handler blew up")

    d.register("slow_echo", slow_echo)
    d.register("explode", explode)
    return d


class TestDispatch:
    @pytest.mark.asyncio
    async def test_sync_handler(self, dispatcher: ProtocolDispatcher) -> None:
        response = await dispatcher.handle({"jsonrpc": "2.0", "method": "echo", "params": {"a": 1}, "id": 7})
        assert response == {"jsonrpc": "2.0", "result": {"a": 1}, "id": 7}

    @pytest.mark.asyncio
    async def test_async_handler(self, dispatcher: ProtocolDispatcher) -> None:
        response = await dispatcher.handle({"jsonrpc": "2.0", "method": "slow_echo", "params": 1, "id": "x"})
        assert response["result"] == {"async": 1}
        assert response["id"] == "x"

    @pytest.mark.asyncio
    async def test_unknown_method(self, dispatcher: ProtocolDispatcher) -> None:
        response = await dispatcher.handle({"jsonrpc": "2.0", "method": "nope", "id": 3})
        assert response == {
            "jsonrpc": "2.0",
            "error": {"code": METHOD_NOT_FOUND, "message": "Method not found"},
            "id": 3,
        }

    @pytest.mark.asyncio
    async def test_handler_error(self, dispatcher: ProtocolDispatcher) -> None:
        response = await dispatcher.handle({"jsonrpc": "2.0", "method": "explode", "id": 4})
        assert response["error"] == {"code": HANDLER_ERROR, "message": "handler blew up"}
        assert response["id"] == 4
        assert "result" not in response

    @pytest.mark.asyncio
    async def test_missing_id_echoed_as_null(self, dispatcher: ProtocolDispatcher) -> None:
        response = await dispatcher.handle({"jsonrpc": "2.0", "method": "echo", "params": 1})
        assert response["id"] is None
        assert response["result"] == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "message,expected_id",
        [
            ([1, 2, 3], None),
            ("just a string", None),
            ({"jsonrpc": "2.0", "id": 7}, 7),
            ({"jsonrpc": "2.0", "method": 42, "id": "abc"}, "abc"),
            ({"method": "nope", "id": 1.5}, 1.5),
        ],
    )
    async def test_missing_or_unusable_method_is_not_found(
        self, dispatcher: ProtocolDispatcher, message, expected_id,
    ) -> None:
        response = await dispatcher.handle(message)
        assert response["error"] == {"code": METHOD_NOT_FOUND, "message": "Method not found"}
        assert response["id"] == expected_id

    @pytest.mark.asyncio
    async def test_jsonrpc_version_is_not_checked(self, dispatcher: ProtocolDispatcher) -> None:
        response = await dispatcher.handle({"jsonrpc": "1.0", "method": "echo", "params": "hi", "id": 8})
        assert response == {"jsonrpc": "2.0", "result": "hi", "id": 8}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("request_id", [1.5, True, {"nested": 1}, [1]])
    async def test_id_echoed_whatever_its_type(self, dispatcher: ProtocolDispatcher, request_id) -> None:
        ok = await dispatcher.handle({"jsonrpc": "2.0", "method": "echo", "id": request_id})
        failed = await dispatcher.handle({"jsonrpc": "2.0", "method": "explode", "id": request_id})
        assert ok["id"] == request_id
        assert failed["id"] == request_id

    @pytest.mark.asyncio
    async def test_last_registration_wins(self, dispatcher: ProtocolDispatcher) -> None:
        dispatcher.register("echo", lambda params: "replaced")
        response = await dispatcher.handle({"jsonrpc": "2.0", "method": "echo", "id": 1})
        assert response["result"] == "replaced"
        assert dispatcher.methods.count("echo") == 1

    @pytest.mark.asyncio
    async def test_null_result_is_still_present(self, dispatcher: ProtocolDispatcher) -> None:
        response = await dispatcher.handle({"jsonrpc": "2.0", "method": "echo", "id": 1})
        assert "result" in response
        assert response["result"] is None


class TestHelpers:
    def test_parse_error_response(self) -> None:
        assert parse_error_response() == {
            "jsonrpc": "2.0",
            "error": {"code": PARSE_ERROR, "message": "Parse error"},
            "id": None,
        }

    def test_is_notification(self) -> None:
        assert is_notification({"jsonrpc": "2.0", "method": "notifications/initialized"})
        assert not is_notification({"jsonrpc": "2.0", "method": "notifications/initialized", "id": 1})
        assert not is_notification({"jsonrpc": "2.0", "method": "list_tools"})
        assert not is_notification("text")
