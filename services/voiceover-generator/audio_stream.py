"""
Voiceover Generator — Stream assembly

Consumes the async chunk stream returned by generate_content_stream() and
writes one audio file per inline-audio chunk, in arrival order:

    <output_dir>/audio_output_0.wav
    <output_dir>/audio_output_1.wav
    ...
"""

import logging
import mimetypes
import os
from collections.abc import AsyncIterable
from dataclasses import dataclass, field
from typing import Any

import aiofiles

from wav import WAV_HEADER_SIZE, convert_to_wav, decode_payload, parse_mime_type, wav_duration_seconds

logger = logging.getLogger(__name__)

_DEFAULT_EXTENSION = "wav"
_FILE_PREFIX = "audio_output_"

# mimetypes' reverse lookup depends on the host's mime.types; pin the common ones
_PREFERRED_EXTENSIONS = {
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/ogg": "ogg",
    "audio/mp4": "m4a",
    "audio/webm": "webm",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
}

# Payloads declared with these types already carry a RIFF header
_WAV_CONTAINER_TYPES = {"audio/wav", "audio/x-wav", "audio/wave", "audio/vnd.wave"}


# ---------------------------------------------------------------------------
# Chunk variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InlineAudio:
    mime_type: str
    data: str | bytes  # str is base64; bytes is already decoded


@dataclass(frozen=True)
class TextChunk:
    text: str


@dataclass(frozen=True)
class EmptyChunk:
    pass


AudioChunk = InlineAudio | TextChunk | EmptyChunk


def chunk_from_response(response: Any) -> AudioChunk:
    """Map one GenerateContentResponse (or an AudioChunk) onto an AudioChunk variant."""
    if isinstance(response, (InlineAudio, TextChunk, EmptyChunk)):
        return response

    candidates = getattr(response, "candidates", None)
    if not candidates:
        return EmptyChunk()
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) if content is not None else None
    if not parts:
        return EmptyChunk()

    inline_data = getattr(parts[0], "inline_data", None)
    if inline_data is not None and inline_data.data:
        return InlineAudio(mime_type=inline_data.mime_type or "", data=inline_data.data)

    text = "".join(getattr(part, "text", None) or "" for part in parts)
    if text:
        return TextChunk(text=text)
    return EmptyChunk()


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@dataclass
class SavedAudioFile:
    file_name: str
    path: str
    extension: str
    mime_type: str
    size_bytes: int
    duration_seconds: float | None = None


@dataclass
class StreamOutput:
    files: list[SavedAudioFile] = field(default_factory=list)
    texts: list[str] = field(default_factory=list)


def extension_for_mime_type(mime_type: str) -> str:
    """File extension for a declared MIME type, ``wav`` when it is unknown."""
    base_type = mime_type.split(";", 1)[0].strip().lower()
    if not base_type:
        return _DEFAULT_EXTENSION
    subtype = base_type.partition("/")[2]
    if subtype.startswith("l") and subtype[1:].isdigit():
        # Raw PCM (audio/L16 etc.) gets a WAV header
        return _DEFAULT_EXTENSION
    if base_type in _PREFERRED_EXTENSIONS:
        return _PREFERRED_EXTENSIONS[base_type]
    extension = mimetypes.guess_extension(base_type)
    if not extension:
        return _DEFAULT_EXTENSION
    return extension.lstrip(".")


def encode_audio(chunk: InlineAudio) -> tuple[bytes, str, float | None]:
    """Return (file bytes, extension, duration) for one inline-audio chunk."""
    extension = extension_for_mime_type(chunk.mime_type)
    base_type = chunk.mime_type.split(";", 1)[0].strip().lower()

    if extension != "wav" or base_type in _WAV_CONTAINER_TYPES:
        return decode_payload(chunk.data), extension, None

    buffer = convert_to_wav(chunk.data, chunk.mime_type)
    duration = wav_duration_seconds(len(buffer) - WAV_HEADER_SIZE, parse_mime_type(chunk.mime_type))
    return buffer, extension, duration


def clear_audio_outputs(output_dir: str) -> int:
    """Delete audio_output_* files left in output_dir; returns how many were removed."""
    if not os.path.isdir(output_dir):
        return 0
    removed = 0
    for name in os.listdir(output_dir):
        path = os.path.join(output_dir, name)
        if name.startswith(_FILE_PREFIX) and os.path.isfile(path):
            os.remove(path)
            removed += 1
    if removed:
        logger.info("Removed %d stale file(s) from %s", removed, output_dir)
    return removed


async def save_binary_file(path: str, content: bytes) -> None:
    async with aiofiles.open(path, "wb") as f:
        await f.write(content)
    logger.info("Saved %s (%d bytes)", path, len(content))


async def process_stream(chunks: AsyncIterable[Any], output_dir: str) -> StreamOutput:
    """Write every inline-audio chunk of the stream to output_dir.

    The file index is local to this call.  Empty chunks are skipped; text
    chunks are collected in StreamOutput.texts.  Decode and write errors
    propagate and files already written are left in place.
    """
    os.makedirs(output_dir, exist_ok=True)
    output = StreamOutput()
    file_index = 0

    async for raw_chunk in chunks:
        chunk = chunk_from_response(raw_chunk)

        if isinstance(chunk, EmptyChunk):
            logger.debug("Skipping chunk with no usable content")
            continue

        if isinstance(chunk, TextChunk):
            logger.info("Text received from TTS stream: %s", chunk.text)
            output.texts.append(chunk.text)
            continue

        buffer, extension, duration = encode_audio(chunk)
        file_name = f"{_FILE_PREFIX}{file_index}.{extension}"
        file_index += 1

        path = os.path.join(output_dir, file_name)
        await save_binary_file(path, buffer)
        output.files.append(
            SavedAudioFile(
                file_name=file_name,
                path=path,
                extension=extension,
                mime_type=chunk.mime_type,
                size_bytes=len(buffer),
                duration_seconds=duration,
            )
        )

    logger.info(
        "Stream complete: %d file(s), %d text chunk(s) in %s",
        len(output.files), len(output.texts), output_dir,
    )
    return output
