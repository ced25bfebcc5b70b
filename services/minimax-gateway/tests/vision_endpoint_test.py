import json
from unittest.mock import MagicMock

import pytest
from connections import minimax_connection_provider

CHAT = "/v1/text/chatcompletion_v2"
ENDPOINT = "/functions/v1/minimax-vision"

IMAGE = "data:image/jpeg;base64,/9j/4AAQ"


def completion(content):
    return {"json": {"choices": [{"message": {"content": content}}], "usage": {"total_tokens": 120}}}


def test_vision_returns_objects(client, stub):
    objects = [{"name": "ceiling fan", "box_2d": [100, 200, 600, 800]}]
    stub.on(CHAT, completion(json.dumps({"objects": objects})))

    resp = client.post(ENDPOINT, json={"imageBase64": IMAGE, "apiKey": "k"})

    assert resp.status_code == 200
    assert resp.json() == {"objects": objects, "usage": {"total_tokens": 120}}


def test_vision_request_uses_low_temperature_and_json_mode(client, stub):
    stub.on(CHAT, completion('{"objects": []}'))

    client.post(ENDPOINT, json={"imageBase64": IMAGE, "apiKey": "k"})

    sent = stub.payload(CHAT)
    assert sent["temperature"] == 0.3
    assert sent["max_tokens"] == 2048
    assert sent["response_format"] == {"type": "json_object"}
    assert "0-1000" in sent["messages"][0]["content"]
    assert sent["messages"][1]["content"][0]["image_url"]["url"] == IMAGE


def test_vision_missing_objects_key_degrades_to_empty_list(client, stub):
    stub.on(CHAT, completion('{"detections": []}'))

    resp = client.post(ENDPOINT, json={"imageBase64": IMAGE, "apiKey": "k"})

    assert resp.status_code == 200
    assert resp.json()["objects"] == []


def test_vision_missing_image(client, stub):
    resp = client.post(ENDPOINT, json={"apiKey": "k"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing image data"
    assert stub.requests == []


def test_vision_no_content_echoes_raw_response(client, stub):
    stub.on(CHAT, {"json": {"choices": [{"message": {"content": None}}], "id": "abc"}})

    resp = client.post(ENDPOINT, json={"imageBase64": IMAGE, "apiKey": "k"})

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "No response"
    assert body["rawResponse"]["id"] == "abc"


def test_vision_unparseable_detection(client, stub):
    stub.on(CHAT, completion("I see a fan."))

    resp = client.post(ENDPOINT, json={"imageBase64": IMAGE, "apiKey": "k"})

    assert resp.status_code == 500
    assert resp.json()["error"] == "Invalid detection format"
    assert resp.json()["details"] == "I see a fan."


@pytest.mark.parametrize("objects", [{"a": 1}, "a fan", 3])
def test_vision_non_list_objects_degrade_to_empty_list(client, stub, objects):
    stub.on(CHAT, completion(json.dumps({"objects": objects})))

    resp = client.post(ENDPOINT, json={"imageBase64": IMAGE, "apiKey": "k"})

    assert resp.status_code == 200
    assert resp.json()["objects"] == []


def test_vision_logs_upstream_status_and_body_preview(client, stub, monkeypatch):
    recorder = MagicMock()
    monkeypatch.setattr(minimax_connection_provider, "logger", recorder)
    stub.on(CHAT, completion(json.dumps({"objects": [], "note": "x" * 800})))

    client.post(ENDPOINT, json={"imageBase64": IMAGE, "apiKey": "k"})

    events = [c for c in recorder.info.call_args_list if c.args[0] == "chat_completion_response"]
    assert len(events) == 1
    assert events[0].kwargs["status"] == 200
    assert len(events[0].kwargs["preview"]) == 500
