"""Auphonic HTTP client against a mocked transport."""

from __future__ import annotations

import json

import httpx
import pytest

from memoir_audio.errors import ProviderError
from memoir_audio.services.auphonic import AuphonicClient, ProductionReport, build_production_config


def _client(handler):
    return AuphonicClient("secret-key", base_url="https://auphonic.test", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_production_lifecycle_requests():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        assert request.headers["Authorization"] == "Bearer secret-key"
        path = request.url.path
        if path == "/api/productions.json":
            body = json.loads(request.content)
            assert body["output_files"][0]["format"] == "mp3"
            return httpx.Response(200, json={"data": {"uuid": "abc123"}})
        if path.endswith("/upload.json"):
            assert b'name="input_file"' in request.content
            return httpx.Response(200, json={"data": {}})
        if path.endswith("/start.json"):
            return httpx.Response(200, json={"data": {}})
        if path == "/api/production/abc123.json":
            return httpx.Response(
                200,
                json={
                    "data": {
                        "uuid": "abc123",
                        "status": 3,
                        "status_string": "Done",
                        "output_files": [
                            {"format": "mp3", "download_url": "https://auphonic.test/dl/out.mp3", "size": 4}
                        ],
                    }
                },
            )
        if path == "/dl/out.mp3":
            return httpx.Response(200, content=b"ID3!")
        return httpx.Response(404)

    client = _client(handler)
    try:
        production_id = await client.create_production(build_production_config("cleaner"))
        await client.upload(production_id, b"raw", filename="audio.webm", content_type="audio/webm")
        await client.start(production_id)
        report = await client.get_status(production_id)
        audio = await client.download(report.outputs[0].download_url)
    finally:
        await client.aclose()

    assert production_id == "abc123"
    assert report.status == "done"
    assert audio == b"ID3!"
    assert [method for method, _ in seen] == ["POST", "POST", "POST", "GET", "GET"]


@pytest.mark.asyncio
async def test_non_success_status_raises_provider_error():
    client = _client(lambda request: httpx.Response(401, json={"error": "bad key"}))
    try:
        with pytest.raises(ProviderError) as excinfo:
            await client.create_production(build_production_config())
    finally:
        await client.aclose()

    assert excinfo.value.status == 401
    assert excinfo.value.provider == "auphonic"
    assert "bad key" not in excinfo.value.message


@pytest.mark.asyncio
async def test_transport_failure_raises_provider_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client = _client(handler)
    try:
        with pytest.raises(ProviderError):
            await client.start("abc123")
    finally:
        await client.aclose()


def test_from_config_without_key_is_disabled():
    from memoir_audio.config.settings import AuphonicConfig

    assert AuphonicClient.from_config(AuphonicConfig(api_key=None)) is None


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        ({"status": 3, "status_string": "Done", "error_message": "boom"}, "error"),
        ({"status": 2, "status_string": "Done"}, "done"),
        ({"status": 1, "status_string": "Waiting"}, "waiting"),
        ({"status": 4, "status_string": "Audio Processing"}, "processing"),
        ({"status": "9", "status_string": "Incomplete", "error_status": "Failed"}, "error"),
    ],
)
def test_report_status_precedence(data, expected):
    assert ProductionReport.from_payload({"data": data}).status == expected


def test_cutter_and_preset_configs():
    cutter = build_production_config("cutter")
    preset = build_production_config("cleaner", preset="p-1")

    assert cutter["algorithms"]["filler_cutter"] is True
    assert preset == {
        "output_files": [{"format": "mp3", "bitrate": "128"}],
        "metadata": {"title": "Memoir audio cleanup - cleaner"},
        "preset": "p-1",
    }
