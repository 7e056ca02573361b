"""
Voiceover Generator — Pipeline

Pipeline:
1. Prompt: the text, prefixed with "[Émotion: X]" when an emotion is given
2. Gemini 2.5 Flash TTS (streaming) → inline PCM chunks
3. PCM → WAV, one file per chunk, under a per-request directory

The whole attempt (open stream + consume it) is retried on 429 only.

Entry point: generate_voiceover(text, voice_name=None, emotion=None) -> VoiceoverResult
"""

import asyncio
import json
import logging
import os
import uuid
from dataclasses import dataclass, field

from google import genai
from google.genai import types
from google.oauth2 import service_account

import config
from audio_stream import SavedAudioFile, clear_audio_outputs, process_stream
from retries import retry_on_rate_limit

logger = logging.getLogger(__name__)


@dataclass
class VoiceoverResult:
    request_id: str
    prompt: str
    voice_name: str
    output_dir: str
    files: list[SavedAudioFile] = field(default_factory=list)
    texts: list[str] = field(default_factory=list)
    attempts: int = 1


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

def get_tts_client() -> genai.Client:
    """Vertex AI client when service-account JSON is configured, Gemini API key client otherwise."""
    if config.GOOGLE_SERVICE_ACCOUNT_JSON:
        sa_info = json.loads(config.GOOGLE_SERVICE_ACCOUNT_JSON)
        credentials = service_account.Credentials.from_service_account_info(
            sa_info,
            scopes=["https://www.googleapis.com/auth/cloud-platform"],
        )
        return genai.Client(
            vertexai=True,
            project=sa_info["project_id"],
            location=config.GOOGLE_CLOUD_LOCATION,
            credentials=credentials,
        )
    if config.GEMINI_API_KEY:
        return genai.Client(api_key=config.GEMINI_API_KEY)
    raise ValueError("GEMINI_API_KEY environment variable is required")


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------

def build_prompt(text: str, emotion: str | None = None) -> str:
    if emotion:
        return f"[Émotion: {emotion}] {text}"
    return text


def build_generation_config(voice_name: str) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        temperature=config.TTS_TEMPERATURE,
        response_modalities=["AUDIO"],
        speech_config=types.SpeechConfig(
            voice_config=types.VoiceConfig(
                prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice_name)
            )
        ),
    )


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

async def generate_voiceover(
    text: str,
    voice_name: str | None = None,
    emotion: str | None = None,
    *,
    client: genai.Client | None = None,
    output_dir: str | None = None,
    request_id: str | None = None,
    max_attempts: int | None = None,
    retry_delay_ms: int | None = None,
    sleep=asyncio.sleep,
) -> VoiceoverResult:
    """Synthesize text and write the streamed audio under <output_dir>/<request_id>/.

    Raises ValueError on empty text or missing credentials; upstream errors
    propagate once the rate-limit retries are used up.
    """
    if not text.strip():
        raise ValueError("Empty voiceover text")

    voice_name = voice_name or config.DEFAULT_VOICE_NAME
    request_id = request_id or uuid.uuid4().hex
    request_dir = os.path.join(output_dir or config.AUDIO_OUTPUT_DIR, request_id)
    prompt = build_prompt(text, emotion)

    if client is None:
        client = get_tts_client()

    contents = [types.Content(role="user", parts=[types.Part.from_text(text=prompt)])]
    generation_config = build_generation_config(voice_name)

    logger.info(
        "Generating voiceover request_id=%s: voice=%s, emotion=%s, %d chars",
        request_id, voice_name, emotion or "neutral", len(prompt),
    )

    async def _attempt():
        # A rate limit can land mid-stream; the retry must not inherit its files
        clear_audio_outputs(request_dir)
        stream = await client.aio.models.generate_content_stream(
            model=config.TTS_MODEL,
            contents=contents,
            config=generation_config,
        )
        return await process_stream(stream, request_dir)

    outcome = await retry_on_rate_limit(
        _attempt,
        max_attempts=max_attempts if max_attempts is not None else config.TTS_MAX_RETRIES,
        retry_delay_ms=retry_delay_ms if retry_delay_ms is not None else config.TTS_RETRY_DELAY_MS,
        sleep=sleep,
        label=f"TTS request {request_id}",
    )
    stream_output = outcome.result

    if not stream_output.files:
        logger.warning("Voiceover request_id=%s produced no audio files", request_id)

    logger.info(
        "Voiceover ready request_id=%s: %d file(s), %d bytes, %d attempt(s)",
        request_id,
        len(stream_output.files),
        sum(f.size_bytes for f in stream_output.files),
        outcome.attempts,
    )

    return VoiceoverResult(
        request_id=request_id,
        prompt=prompt,
        voice_name=voice_name,
        output_dir=request_dir,
        files=stream_output.files,
        texts=stream_output.texts,
        attempts=outcome.attempts,
    )
