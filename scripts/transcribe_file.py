"""Manually run one speech-to-text provider (and optionally enrichment) on a local file.

Usage: python scripts/transcribe_file.py path/to/audio.webm [primary|secondary] [--enrich]
"""

import asyncio
import mimetypes
import os
import sys

sys.path.append(os.getcwd())

from memoir_audio.config.dependencies import build_provider_registry
from memoir_audio.config.settings import settings
from memoir_audio.errors import PipelineError
from memoir_audio.pipelines.audio import AudioAsset, EnrichmentChain, TranscriptionPipeline


async def main() -> None:
    args = [arg for arg in sys.argv[1:] if not arg.startswith("--")]
    enrich = "--enrich" in sys.argv
    if not args:
        print(__doc__)
        return

    file_path = args[0]
    choice = args[1] if len(args) > 1 else "primary"
    if not os.path.exists(file_path):
        print(f"File '{file_path}' not found.")
        return

    with open(file_path, "rb") as f:
        audio_bytes = f.read()
    content_type = mimetypes.guess_type(file_path)[0] or "audio/webm"
    asset = AudioAsset(data=audio_bytes, content_type=content_type)

    registry = build_provider_registry(settings)
    pipeline = TranscriptionPipeline(
        registry.transcriber(choice),
        EnrichmentChain(registry.llm),
        registry.temp_files,
    )
    print(f"Transcribing {asset.size_bytes} bytes with {pipeline.transcriber.provider_id}...")
    try:
        if enrich:
            run = await pipeline.run(asset)
            print("\n--- Formatted story ---")
            print(run.story.formatted_text)
            print("\n--- Lesson options ---")
            for label, text in run.story.lesson_options.as_dict().items():
                print(f"{label}: {text}")
            print(f"\nsource={run.story.source} total_ms={run.timing.total_ms} cost=${run.cost.total:.6f}")
        else:
            result = await pipeline.transcribe(asset)
            print("\n--- Transcript ---")
            print(result.raw_text)
            print(f"\nlatency_ms={result.transcription_latency_ms} confidence={result.confidence}")
    except PipelineError as e:
        print(f"\n{type(e).__name__}: {e.message}")
    finally:
        await registry.aclose()


if __name__ == "__main__":
    asyncio.run(main())
