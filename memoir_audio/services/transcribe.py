"""Amazon Transcribe integration helpers using the Streaming API."""

from __future__ import annotations

import asyncio
import logging
import subprocess
import time

from amazon_transcribe.auth import StaticCredentialResolver
from amazon_transcribe.client import TranscribeStreamingClient
from amazon_transcribe.handlers import TranscriptResultStreamHandler
from amazon_transcribe.model import TranscriptEvent
from fastapi.concurrency import run_in_threadpool

from memoir_audio.config.settings import TranscribeConfig
from memoir_audio.telemetry import observe_provider_call

from .transcription import TranscriptionAdapter, TranscriptionError, TranscriptionResult

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 8192


class AmazonTranscribeService(TranscriptionAdapter):
    """Secondary provider: streams PCM audio and returns the transcript only."""

    provider_id = "amazon-transcribe"

    def __init__(
        self,
        region: str,
        language_code: str = "en-US",
        media_sample_rate_hz: int = 16000,
        media_encoding: str = "pcm",
        client: TranscribeStreamingClient | None = None,
    ) -> None:
        self._region = region
        self._language_code = language_code
        self._media_sample_rate_hz = media_sample_rate_hz
        self._media_encoding = media_encoding
        self._client = client or TranscribeStreamingClient(region=region)

    @classmethod
    def from_config(cls, config: TranscribeConfig) -> "AmazonTranscribeService":
        client = None
        if config.access_key and config.secret_key:
            client = TranscribeStreamingClient(
                region=config.region,
                credential_resolver=StaticCredentialResolver(
                    access_key_id=config.access_key,
                    secret_access_key=config.secret_key,
                ),
            )
        return cls(
            region=config.region,
            language_code=config.language_code,
            media_sample_rate_hz=config.media_sample_rate_hz,
            client=client,
        )

    async def transcribe(self, asset) -> TranscriptionResult:
        """Stream audio to Transcribe and return the full transcript."""

        if not asset.data:
            raise TranscriptionError(self.provider_id, "The uploaded audio file is empty.")

        started = time.perf_counter()
        pcm_data = await run_in_threadpool(self._convert_to_pcm_sync, asset)

        try:
            transcript = await self._stream(pcm_data)
        except Exception as exc:
            observe_provider_call(self.provider_id, "stream", time.perf_counter() - started, success=False)
            logger.error("Streaming loop failed: %s", exc)
            raise TranscriptionError(self.provider_id, f"Streaming transcription failed: {exc}") from exc

        elapsed = time.perf_counter() - started
        observe_provider_call(self.provider_id, "stream", elapsed, success=True)
        logger.info("Transcription complete. Length: %s", len(transcript))
        return TranscriptionResult(
            raw_text=transcript,
            provider_id=self.provider_id,
            transcription_latency_ms=int(elapsed * 1000),
        )

    async def _stream(self, pcm_data: bytes) -> str:
        stream = await self._client.start_stream_transcription(
            language_code=self._language_code,
            media_sample_rate_hz=self._media_sample_rate_hz,
            media_encoding=self._media_encoding,
        )
        handler = _SimpleTranscriptHandler(stream.output_stream)

        async def write_chunks() -> None:
            # 16-bit mono: 2 bytes per sample; pace the upload at real time.
            bytes_per_sec = self._media_sample_rate_hz * 2
            sleep_time = _CHUNK_SIZE / bytes_per_sec

            logger.debug(
                "Starting stream. Total bytes: %s. Chunk size: %s. Sleep: %.4fs",
                len(pcm_data),
                _CHUNK_SIZE,
                sleep_time,
            )
            for i in range(0, len(pcm_data), _CHUNK_SIZE):
                await stream.input_stream.send_audio_event(audio_chunk=pcm_data[i : i + _CHUNK_SIZE])
                await asyncio.sleep(sleep_time)
            await stream.input_stream.end_stream()

        await asyncio.gather(write_chunks(), handler.handle_events())
        return handler.transcript.strip()

    def _convert_to_pcm_sync(self, asset) -> bytes:
        """Convert the staged file (or raw bytes via stdin) to s16le PCM with ffmpeg."""

        source = str(asset.path) if asset.path else "pipe:0"
        try:
            process = subprocess.run(
                [
                    "ffmpeg",
                    "-y",
                    "-i", source,
                    "-f", "s16le",
                    "-ac", "1",
                    "-ar", str(self._media_sample_rate_hz),
                    "pipe:1",
                ],
                input=None if asset.path else asset.data,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
            )
        except FileNotFoundError as exc:
            raise TranscriptionError(self.provider_id, "ffmpeg is not installed") from exc
        except subprocess.CalledProcessError as exc:
            error_msg = exc.stderr.decode("utf-8", errors="replace") if exc.stderr else "No stderr"
            logger.error("ffmpeg failed. stderr: %s", error_msg)
            raise TranscriptionError(self.provider_id, "ffmpeg failed to convert audio to PCM") from exc

        if not process.stdout:
            raise TranscriptionError(self.provider_id, "ffmpeg produced no audio")
        return process.stdout


class _SimpleTranscriptHandler(TranscriptResultStreamHandler):
    def __init__(self, transcript_result_stream):
        super().__init__(transcript_result_stream)
        self.transcript = ""

    async def handle_transcript_event(self, transcript_event: TranscriptEvent):
        results = transcript_event.transcript.results
        for result in results:
            if not result.is_partial:
                for alt in result.alternatives[:1]:
                    self.transcript += alt.transcript + " "


__all__ = ["AmazonTranscribeService"]
