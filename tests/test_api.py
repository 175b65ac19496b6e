"""HTTP surface: auth, consent, limits, ingestion and response shapes."""

from __future__ import annotations

import base64
from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from memoir_audio.config.settings import settings
from memoir_audio.controllers.dependencies import get_registry
from memoir_audio.main import app
from memoir_audio.services.auphonic import OutputFile, ProductionReport
from memoir_audio.services.rate_limit import SlidingWindowRateLimiter
from memoir_audio.utils import create_access_token

from .conftest import FakeTranscriber

AUDIO = b"\x1aE\xdf\xa3" + b"\0" * 1024


def _auth(subject: str = "user-1", **claims) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(subject, **claims)}"}


def _upload(data: bytes = AUDIO, content_type: str = "audio/webm") -> dict:
    return {"audio": ("recording.webm", data, content_type)}


@pytest.fixture
def use_registry():
    def install(registry):
        app.dependency_overrides[get_registry] = lambda: registry
        return registry

    yield install
    app.dependency_overrides.clear()


@pytest.fixture
def client(registry, use_registry) -> TestClient:
    use_registry(registry)
    return TestClient(app)


class InstantAuphonic:
    async def create_production(self, config):
        return "prod-9"

    async def upload(self, production_id, data, *, filename, content_type):
        return None

    async def start(self, production_id):
        return None

    async def get_status(self, production_id):
        return ProductionReport(
            production_id=production_id,
            status_code=3,
            status_label="Done",
            outputs=(OutputFile("mp3", "https://auphonic.test/out.mp3", 3),),
        )

    async def download(self, url):
        return b"mp3"

    async def aclose(self):
        return None


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_transcribe_returns_story_lessons_and_meta(client, registry, temp_files):
    response = client.post("/transcribe", files=_upload(), headers=_auth())

    assert response.status_code == 200
    body = response.json()
    assert body["transcription"] == "Formatted story."
    assert set(body["lessonOptions"]) == {"practical", "emotional", "character"}
    assert body["_meta"]["provider"] == "assemblyai"
    assert body["_meta"]["enrichmentSource"] == "model"
    assert body["_meta"]["estimatedCost"] >= 0
    assert body["duration"] == 0

    staged_path = registry.primary_stt.seen_paths[0]
    assert staged_path is not None and not staged_path.exists()
    assert list(temp_files.base_dir.iterdir()) == []


def test_transcribe_with_secondary_provider(client, registry):
    response = client.post("/transcribe?provider=secondary", files=_upload(), headers=_auth())

    assert response.status_code == 200
    assert response.json()["_meta"]["provider"] == "amazon-transcribe"
    assert response.json()["_meta"]["confidence"] is None
    assert registry.primary_stt.seen_paths == []


def test_transcribe_accepts_base64_json_body(client):
    payload = {"audioBase64": base64.b64encode(AUDIO).decode(), "contentType": "audio/mp4"}

    response = client.post("/transcribe", json=payload, headers=_auth())

    assert response.status_code == 200


def test_missing_token_is_rejected(client, registry):
    response = client.post("/transcribe", files=_upload())

    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required"}
    assert registry.primary_stt.seen_paths == []


def test_invalid_token_is_rejected(client):
    response = client.post("/transcribe", files=_upload(), headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid authentication"}


@pytest.mark.parametrize(
    "headers",
    [
        pytest.param(lambda: _auth("blocked-user"), id="deny-list"),
        pytest.param(lambda: _auth("user-2", ai_processing_enabled=False), id="token-flag"),
    ],
)
def test_consent_is_enforced_before_provider_calls(client, registry, fake_llm, headers):
    response = client.post("/transcribe", files=_upload(), headers=headers())

    assert response.status_code == 403
    assert "AI processing is disabled" in response.json()["error"]
    assert registry.primary_stt.seen_paths == []
    assert fake_llm.calls == []


def test_empty_audio_is_rejected(client):
    response = client.post("/transcribe", files=_upload(b""), headers=_auth())

    assert response.status_code == 400
    assert response.json() == {"error": "Uploaded audio file is empty"}


def test_missing_audio_field_is_rejected(client):
    response = client.post("/transcribe", files={"other": ("x.webm", AUDIO, "audio/webm")}, headers=_auth())

    assert response.status_code == 400
    assert response.json() == {"error": "No audio file provided"}


def test_oversized_audio_is_rejected(client, registry, monkeypatch):
    monkeypatch.setattr(settings.pipeline, "max_transcribe_bytes", 512)

    response = client.post("/transcribe", files=_upload(), headers=_auth())

    assert response.status_code == 400
    assert response.json()["error"].startswith("Audio file too large.")
    assert registry.primary_stt.seen_paths == []


def test_unknown_provider_choice_is_a_bad_request(client):
    response = client.post("/transcribe?provider=bogus", files=_upload(), headers=_auth())

    assert response.status_code == 400
    assert "error" in response.json()


def test_provider_failure_maps_to_bad_gateway(registry, use_registry, temp_files):
    use_registry(replace(registry, primary_stt=FakeTranscriber(error="upstream exploded")))
    client = TestClient(app)

    response = client.post("/transcribe", files=_upload(), headers=_auth())

    assert response.status_code == 502
    assert response.json() == {"error": "Transcription failed"}
    assert list(temp_files.base_dir.iterdir()) == []


def test_rate_limit_returns_429_with_retry_after(registry, use_registry):
    use_registry(replace(registry, rate_limiter=SlidingWindowRateLimiter(max_requests=1, window_seconds=60)))
    client = TestClient(app)

    first = client.post("/transcribe", files=_upload(), headers=_auth("limited"))
    second = client.post("/transcribe", files=_upload(), headers=_auth("limited"))

    assert first.status_code == 200
    assert second.status_code == 429
    assert int(second.headers["Retry-After"]) >= 1
    assert second.headers["X-RateLimit-Remaining"] == "0"


def test_clean_without_auphonic_is_unavailable(client):
    response = client.post("/clean", files=_upload(), headers=_auth())

    assert response.status_code == 503
    assert response.json() == {"error": "Auphonic integration not configured. Please set AUPHONIC_API_KEY."}


def test_clean_returns_base64_mp3(registry, use_registry, temp_files):
    use_registry(replace(registry, auphonic=InstantAuphonic()))
    client = TestClient(app)

    response = client.post("/clean?mode=cutter", files=_upload(), headers=_auth())

    assert response.status_code == 200
    body = response.json()
    assert base64.b64decode(body["cleanedAudioBase64"]) == b"mp3"
    assert body["productionId"] == "prod-9"
    assert body["originalAudioSize"] == len(AUDIO)
    assert body["_meta"]["pollAttempts"] == 1
    assert list(temp_files.base_dir.iterdir()) == []


def test_compare_reports_every_path(client):
    response = client.post("/compare", files=_upload(), headers=_auth())

    assert response.status_code == 200
    body = response.json()
    assert set(body["results"]) == {"pathA", "pathB"}
    assert body["results"]["pathA"]["status"] == "success"
    assert body["results"]["pathB"]["differenceFromBaseline"] == 0
    assert body["audioMetadata"]["fileSizeBytes"] == len(AUDIO)


def test_compare_with_cleanup_path(registry, use_registry):
    use_registry(replace(registry, auphonic=InstantAuphonic()))
    client = TestClient(app)

    response = client.post("/compare?includeCleanup=true", files=_upload(), headers=_auth())

    assert response.status_code == 200
    path_c = response.json()["results"]["pathC"]
    assert path_c["status"] == "success"
    assert path_c["cost"]["cleanup"] > 0


def test_unknown_route_uses_error_shape(client):
    response = client.get("/nope")

    assert response.status_code == 404
    assert "error" in response.json()
