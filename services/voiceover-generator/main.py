"""
Voiceover Generator — HTTP Service

POST /generate    — synthesize a voiceover, returns the generated file URLs
GET  /audio-list  — every audio file currently in the output directory
GET  /audio/...   — static serving of generated files
GET  /health      — health check
"""

import logging
import mimetypes
import os

from fastapi import Depends, FastAPI, HTTPException
from fastapi.staticfiles import StaticFiles
from google import genai
from pydantic import BaseModel, Field, field_validator

import config
from pipeline import generate_voiceover, get_tts_client
from retries import is_rate_limit_error

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Voiceover Generator")

_AUDIO_EXTENSIONS = (".wav", ".mp3", ".ogg", ".m4a", ".webm")

os.makedirs(config.AUDIO_OUTPUT_DIR, exist_ok=True)
app.mount(config.AUDIO_URL_PREFIX, StaticFiles(directory=config.AUDIO_OUTPUT_DIR), name="audio")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class GenerateAudioRequest(BaseModel):
    text: str = Field(min_length=1)
    voice_name: str | None = None
    emotion: str | None = None
    speed: float = Field(default=1.0, ge=0.5, le=2.0)

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("text must not be blank")
        return value


class GeneratedFile(BaseModel):
    file_name: str
    url: str
    size_bytes: int
    duration_seconds: float | None = None


class GenerateAudioData(BaseModel):
    request_id: str
    text: str
    voice_name: str
    emotion: str
    speed: float
    files: list[GeneratedFile]


class GenerateAudioResponse(BaseModel):
    success: bool = True
    message: str
    data: GenerateAudioData


class AudioListEntry(BaseModel):
    name: str
    url: str
    size_bytes: int
    mime_type: str | None


class AudioListResponse(BaseModel):
    success: bool = True
    count: int
    files: list[AudioListEntry]


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_client() -> genai.Client:
    try:
        return get_tts_client()
    except ValueError:
        logger.error("TTS credentials are not configured")
        raise HTTPException(status_code=500, detail="GEMINI_API_KEY not configured")


def _public_url(relative_path: str) -> str:
    return f"{config.AUDIO_URL_PREFIX}/{relative_path.replace(os.sep, '/')}"


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/health")
def health():
    return {"status": "ok", "audio_output_dir": config.AUDIO_OUTPUT_DIR}


@app.post("/generate", response_model=GenerateAudioResponse)
async def generate(body: GenerateAudioRequest, client: genai.Client = Depends(get_client)):
    logger.info(
        "Generate request: voice=%s, emotion=%s, %d chars",
        body.voice_name, body.emotion, len(body.text),
    )

    try:
        result = await generate_voiceover(
            body.text,
            voice_name=body.voice_name,
            emotion=body.emotion,
            client=client,
            output_dir=config.AUDIO_OUTPUT_DIR,
        )
    except Exception as exc:
        logger.exception("Voiceover generation failed")
        if is_rate_limit_error(exc):
            raise HTTPException(status_code=429, detail="TTS rate limit reached, try again later")
        raise HTTPException(status_code=500, detail="Audio generation failed")

    files = [
        GeneratedFile(
            file_name=f.file_name,
            url=_public_url(f"{result.request_id}/{f.file_name}"),
            size_bytes=f.size_bytes,
            duration_seconds=f.duration_seconds,
        )
        for f in result.files
    ]

    return GenerateAudioResponse(
        message="Audio generated successfully",
        data=GenerateAudioData(
            request_id=result.request_id,
            text=body.text,
            voice_name=result.voice_name,
            emotion=body.emotion or "neutral",
            speed=body.speed,
            files=files,
        ),
    )


@app.get("/audio-list", response_model=AudioListResponse)
def audio_list():
    entries = []
    root = config.AUDIO_OUTPUT_DIR
    for dirpath, _, filenames in os.walk(root):
        for name in sorted(filenames):
            if not name.lower().endswith(_AUDIO_EXTENSIONS):
                continue
            path = os.path.join(dirpath, name)
            relative = os.path.relpath(path, root)
            entries.append(
                AudioListEntry(
                    name=relative.replace(os.sep, "/"),
                    url=_public_url(relative),
                    size_bytes=os.path.getsize(path),
                    mime_type=mimetypes.guess_type(name)[0],
                )
            )
    entries.sort(key=lambda e: e.name)
    return AudioListResponse(count=len(entries), files=entries)
