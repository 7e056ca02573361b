"""
Voiceover Generator — WAV container

Gemini TTS streams raw little-endian PCM tagged with a MIME type such as
``audio/L16;rate=24000``.  This module turns such a payload into a
playable RIFF/WAVE file by prepending the canonical 44-byte PCM header.
"""

import base64
import binascii
import struct
from dataclasses import dataclass

DEFAULT_CHANNEL_COUNT = 1

WAV_HEADER_SIZE = 44
_WAV_HEADER_FORMAT = "<4sI4s4sIHHIIHH4sI"
_FMT_CHUNK_SIZE = 16
_PCM_FORMAT_TAG = 1


class WavFormatError(ValueError):
    """PCM format parameters are missing or out of range."""


class AudioDecodeError(ValueError):
    """An inline audio payload is not valid base64."""


@dataclass(frozen=True)
class PcmFormatParameters:
    channel_count: int = DEFAULT_CHANNEL_COUNT
    sample_rate_hz: int | None = None
    bits_per_sample: int | None = None

    @property
    def byte_rate(self) -> int:
        return self.sample_rate_hz * self.channel_count * self.bits_per_sample // 8

    @property
    def block_align(self) -> int:
        return self.channel_count * self.bits_per_sample // 8

    def require_resolved(self) -> "PcmFormatParameters":
        """Raise WavFormatError unless every field is a positive integer."""
        if self.sample_rate_hz is None:
            raise WavFormatError("PCM sample rate is not set (missing rate= parameter?)")
        if self.bits_per_sample is None:
            raise WavFormatError("PCM bit depth is not set (expected an L<bits> subtype)")
        for name in ("channel_count", "sample_rate_hz", "bits_per_sample"):
            if getattr(self, name) < 1:
                raise WavFormatError(f"{name} must be >= 1, got {getattr(self, name)}")
        # Sub-byte frames cannot be addressed by the header's integer fields
        if self.block_align < 1 or self.byte_rate < 1:
            raise WavFormatError(
                f"{self.bits_per_sample}-bit x {self.channel_count} channel frames at "
                f"{self.sample_rate_hz} Hz give block_align={self.block_align}, byte_rate={self.byte_rate}"
            )
        return self


def parse_mime_type(mime_type: str) -> PcmFormatParameters:
    """Extract bit depth and sample rate from a PCM MIME type.

    ``audio/L16;rate=24000`` -> 16 bits, 24000 Hz, mono.  Fields that cannot
    be parsed are left as None; unknown parameters are ignored.
    """
    file_type, *params = [segment.strip() for segment in mime_type.split(";")]
    _, _, subtype = file_type.partition("/")

    bits_per_sample = None
    if subtype.startswith("L"):
        try:
            bits_per_sample = int(subtype[1:])
        except ValueError:
            pass

    sample_rate_hz = None
    for param in params:
        key, _, value = (part.strip() for part in param.partition("="))
        if key == "rate":
            try:
                sample_rate_hz = int(value)
            except ValueError:
                pass

    return PcmFormatParameters(
        channel_count=DEFAULT_CHANNEL_COUNT,
        sample_rate_hz=sample_rate_hz,
        bits_per_sample=bits_per_sample,
    )


def create_wav_header(data_length: int, params: PcmFormatParameters) -> bytes:
    """Build the 44-byte RIFF/WAVE PCM header for data_length bytes of samples."""
    if data_length < 0:
        raise WavFormatError(f"data_length must be >= 0, got {data_length}")
    params.require_resolved()

    return struct.pack(
        _WAV_HEADER_FORMAT,
        b"RIFF",
        36 + data_length,
        b"WAVE",
        b"fmt ",
        _FMT_CHUNK_SIZE,
        _PCM_FORMAT_TAG,
        params.channel_count,
        params.sample_rate_hz,
        params.byte_rate,
        params.block_align,
        params.bits_per_sample,
        b"data",
        data_length,
    )


def decode_payload(payload: str | bytes) -> bytes:
    """Return raw bytes for an inline payload (base64 text, or bytes already decoded)."""
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise AudioDecodeError(f"Inline audio payload is not valid base64: {exc}") from exc


def convert_to_wav(payload: str | bytes, mime_type: str) -> bytes:
    """Wrap a raw PCM payload in a WAV container.

    The header's data size is the decoded sample length, not the length of
    the base64 text.
    """
    params = parse_mime_type(mime_type).require_resolved()
    pcm_data = decode_payload(payload)
    return create_wav_header(len(pcm_data), params) + pcm_data


def wav_duration_seconds(data_length: int, params: PcmFormatParameters) -> float:
    return data_length / params.require_resolved().byte_rate
