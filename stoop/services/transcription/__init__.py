"""
Transcription module - Speech-to-text abstraction layer.

Factory function for creating STT instances based on provider configuration.
"""

from stoop.core.config import Settings

from .base import BaseSTT

__all__ = ["BaseSTT", "create_stt"]


def create_stt(provider: str, settings: Settings | None = None) -> BaseSTT:
    """
    Factory function to create STT instance based on provider.

    Args:
        provider: STT provider name ("openai" for the hosted API, "local" for faster-whisper)
        settings: Settings passed through to the provider

    Returns:
        BaseSTT implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider == "openai":
        from .openai_api import OpenAIWhisperSTT

        return OpenAIWhisperSTT(settings=settings)
    if provider in ("local", "whisper"):
        from .whisper import WhisperSTT

        return WhisperSTT(settings=settings)
    raise ValueError(f"Unknown STT provider: {provider}")
