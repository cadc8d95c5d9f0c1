"""Handles Speech-to-Text transcription through the OpenAI audio API."""

import logging
import os
import random
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

from openai import (
    APIConnectionError,
    APITimeoutError,
    InternalServerError,
    OpenAI,
    OpenAIError,
    RateLimitError,
)

from .exceptions import ConfigurationError, TranscriptionError
from .models import DEFAULT_PROMPT

logger = logging.getLogger(__name__)

# Errors worth another attempt; anything else from the API fails the chunk at once
RETRYABLE_ERRORS = (APIConnectionError, APITimeoutError, RateLimitError, InternalServerError)

class Transcriber(ABC):
    """Abstract base class for transcription services."""

    @abstractmethod
    def transcribe(self, audio_path: str) -> str:
        """
        Transcribes the given audio file.

        Args:
            audio_path: Path to the audio file.

        Returns:
            The recognized text. An empty string means nothing was recognized.

        Raises:
            TranscriptionError: If transcription fails.
            FileNotFoundError: If the audio file doesn't exist.
        """
        pass

def _response_text(response: Any) -> str:
    if response is None:
        return ""
    if isinstance(response, str):
        return response
    if isinstance(response, dict):
        return str(response.get("text") or "")
    return str(getattr(response, "text", None) or "")

class OpenAITranscriber(Transcriber):
    """Sends one audio file per request to the OpenAI transcription endpoint."""

    def __init__(
        self,
        model: str = "gpt-4o-mini-transcribe",
        language: Optional[str] = None,
        prompt: Optional[str] = DEFAULT_PROMPT,
        api_key: Optional[str] = None,
        max_retries: int = 3,
        timeout: float = 600.0,
        client: Optional[Any] = None,
    ):
        """
        Initializes the OpenAITranscriber.

        Args:
            model: Transcription model name (e.g. "gpt-4o-mini-transcribe", "whisper-1").
            language: Optional ISO-639-1 language hint. Omitted from the request when None.
            prompt: Optional prompt sent with every chunk.
            api_key: API key. Falls back to the OPENAI_API_KEY environment variable.
            max_retries: Total attempts per chunk before giving up.
            timeout: Per-request timeout in seconds.
            client: Pre-built client exposing `audio.transcriptions.create`.

        Raises:
            ConfigurationError: If no client can be created (e.g. missing API key).
        """
        self.model = model
        self.language = language
        self.prompt = prompt
        self.max_retries = max(1, int(max_retries))
        self.timeout = timeout

        if client is None:
            # The SDK itself reads OPENAI_API_KEY; checking here gives a clearer error
            key = api_key or os.environ.get("OPENAI_API_KEY", "").strip()
            if not key:
                raise ConfigurationError("No OpenAI API key configured (set OPENAI_API_KEY or openai_api_key).")
            try:
                # Retries are handled below so the SDK must not add its own
                client = OpenAI(api_key=key, max_retries=0)
            except OpenAIError as e:
                raise ConfigurationError(f"Could not create OpenAI client: {e}") from e
        self.client = client
        logger.debug(f"Initialized OpenAITranscriber with model '{self.model}' (language: {self.language or 'auto'})")

    def _request(self, audio_path: str) -> str:
        params = {"model": self.model, "timeout": self.timeout}
        if self.language:
            params["language"] = self.language
        if self.prompt:
            params["prompt"] = self.prompt
        with open(audio_path, "rb") as audio_file:
            response = self.client.audio.transcriptions.create(file=audio_file, **params)
        return _response_text(response).strip()

    def transcribe(self, audio_path: str) -> str:
        """
        Transcribes one audio file, retrying transient provider errors with exponential backoff.

        Connection, timeout, rate-limit and server errors are retried. Other
        API errors (authentication, bad request, ...) fail immediately.

        Args:
            audio_path: Path to the chunk to transcribe.

        Returns:
            The stripped transcript text (possibly empty).

        Raises:
            FileNotFoundError: If the audio file doesn't exist.
            TranscriptionError: On a non-transient API error, or once every attempt failed.
        """
        if not os.path.exists(audio_path):
            raise FileNotFoundError(f"Audio file not found: {audio_path}")

        backoff = 1.0
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                return self._request(audio_path)
            except RETRYABLE_ERRORS as e:
                last_error = e
                if attempt >= self.max_retries:
                    break
                delay = backoff + random.uniform(0.05, 0.4)
                logger.warning(
                    f"Transcription attempt {attempt}/{self.max_retries} for {audio_path} failed: {e}. "
                    f"Retrying in {delay:.1f}s"
                )
                time.sleep(delay)
                backoff = min(backoff * 2, 12.0)
            except (OpenAIError, OSError) as e:
                logger.error(f"Transcription failed for {audio_path}: {e}")
                raise TranscriptionError(f"OpenAI transcription failed: {e}") from e

        logger.error(f"Transcription failed for {audio_path} after {self.max_retries} attempt(s): {last_error}")
        raise TranscriptionError(
            f"OpenAI transcription failed after {self.max_retries} attempt(s): {last_error}"
        ) from last_error
