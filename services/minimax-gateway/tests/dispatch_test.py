import json

import pytest

from client.dispatch import (
    DispatchError,
    DispatchSettings,
    StructuredJSONError,
    call_minimax,
    generate_structured_json,
    parse_structured_json,
)

RELAY = "/functions/v1/minimax-chat"


@pytest.fixture
def dispatch_settings():
    return DispatchSettings(
        GATEWAY_URL="https://gateway.example.com/",
        GATEWAY_ANON_KEY="anon",
        MINIMAX_API_KEY="default-key",
    )


# --- JSON recovery ---


def test_parse_plain_json():
    assert parse_structured_json('{"a": 1}') == {"a": 1}


def test_parse_fenced_json():
    raw = '```json\n{"title": "Fan", "steps": [1, 2]}\n```'

    assert parse_structured_json(raw) == {"title": "Fan", "steps": [1, 2]}


def test_parse_bare_fence_without_language():
    assert parse_structured_json('```\n{"ok": true}\n```') == {"ok": True}


def test_parse_prose_then_object_uses_brace_fallback():
    raw = 'Sure! Here is the data you asked for:\n{"name": "gear", "teeth": 24}\nHope that helps.'

    assert parse_structured_json(raw) == {"name": "gear", "teeth": 24}


def test_parse_no_json_at_all():
    with pytest.raises(StructuredJSONError, match="Invalid JSON response"):
        parse_structured_json("I could not produce an answer.")


def test_parse_broken_brace_span():
    with pytest.raises(StructuredJSONError):
        parse_structured_json("prefix {not: valid} suffix")


# --- Relay calls ---


@pytest.mark.asyncio
async def test_call_minimax_posts_messages_and_default_key(stub, http_client, dispatch_settings):
    stub.on(RELAY, {"json": {"message": "hello", "usage": {}}})
    messages = [{"role": "user", "content": "hi"}]

    reply = await call_minimax(messages, settings=dispatch_settings, http=http_client)

    assert reply == "hello"
    request = stub.calls(RELAY)[0]
    assert str(request.url) == "https://gateway.example.com/functions/v1/minimax-chat"
    assert request.headers["Authorization"] == "Bearer anon"
    assert json.loads(request.content) == {"messages": messages, "apiKey": "default-key"}


@pytest.mark.asyncio
async def test_call_minimax_surfaces_relay_message(stub, http_client, dispatch_settings):
    stub.on(RELAY, {"status": 500, "json": {"error": "Error 1008", "message": "Insufficient balance."}})

    with pytest.raises(DispatchError, match="Insufficient balance."):
        await call_minimax([{"role": "user", "content": "hi"}], settings=dispatch_settings, http=http_client)


@pytest.mark.asyncio
async def test_call_minimax_generic_failure_without_body(stub, http_client, dispatch_settings):
    stub.on(RELAY, {"status": 502, "text": "bad gateway"})

    with pytest.raises(DispatchError, match="Minimax API call failed"):
        await call_minimax([{"role": "user", "content": "hi"}], settings=dispatch_settings, http=http_client)


@pytest.mark.asyncio
async def test_call_minimax_empty_message(stub, http_client, dispatch_settings):
    stub.on(RELAY, {"json": {"message": ""}})

    with pytest.raises(DispatchError, match="No response from AI"):
        await call_minimax([{"role": "user", "content": "hi"}], settings=dispatch_settings, http=http_client)


@pytest.mark.asyncio
async def test_call_minimax_requires_configuration(stub, http_client):
    with pytest.raises(DispatchError, match="Missing environment variables"):
        await call_minimax([], settings=DispatchSettings(GATEWAY_URL="", MINIMAX_API_KEY=""), http=http_client)

    assert stub.requests == []


@pytest.mark.asyncio
async def test_generate_structured_json_recovers_fenced_reply(stub, http_client, dispatch_settings):
    stub.on(RELAY, {"json": {"message": '```json\n{"materials": ["bolt"]}\n```'}})

    result = await generate_structured_json("list materials", settings=dispatch_settings, http=http_client)

    assert result == {"materials": ["bolt"]}
    sent = json.loads(stub.calls(RELAY)[0].content)
    assert sent["messages"][0]["role"] == "system"
    assert "Never use ```json blocks." in sent["messages"][0]["content"]
    assert sent["messages"][1] == {"role": "user", "content": "list materials"}


@pytest.mark.asyncio
async def test_generate_structured_json_with_image_marks_prompt(stub, http_client, dispatch_settings):
    stub.on(RELAY, {"json": {"message": '{"ok": true}'}})

    await generate_structured_json(
        "describe it", image_base64="data:image/png;base64,AAA", settings=dispatch_settings, http=http_client
    )

    user = json.loads(stub.calls(RELAY)[0].content)["messages"][1]["content"]
    assert user.startswith("[Image provided]\n\ndescribe it")
    assert user.endswith("just pure JSON.")


@pytest.mark.asyncio
async def test_generate_structured_json_invalid(stub, http_client, dispatch_settings):
    stub.on(RELAY, {"json": {"message": "no json here"}})

    with pytest.raises(StructuredJSONError):
        await generate_structured_json("anything", settings=dispatch_settings, http=http_client)
