"""Service layer helpers for external integrations."""

from .assemblyai import AssemblyAITranscriber
from .auphonic import AuphonicClient, ProductionReport, build_production_config
from .consent import ConsentGate
from .llm_client import BedrockLlmClient, LanguageModelClient, LlmInvocationError
from .rate_limit import SlidingWindowRateLimiter, rate_limit_key
from .registry import ProviderChoice, ProviderRegistry
from .temp_files import StagedFile, TempFileManager
from .transcribe import AmazonTranscribeService
from .transcription import TranscriptionAdapter, TranscriptionError, TranscriptionResult

__all__ = [
    "AmazonTranscribeService",
    "AssemblyAITranscriber",
    "AuphonicClient",
    "BedrockLlmClient",
    "ConsentGate",
    "LanguageModelClient",
    "LlmInvocationError",
    "ProductionReport",
    "ProviderChoice",
    "ProviderRegistry",
    "SlidingWindowRateLimiter",
    "StagedFile",
    "TempFileManager",
    "TranscriptionAdapter",
    "TranscriptionError",
    "TranscriptionResult",
    "build_production_config",
    "rate_limit_key",
]
