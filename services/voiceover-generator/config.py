"""
Voiceover Generator — Configuration

Every knob is read from the environment once, at import time.
"""

import os

GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
GOOGLE_SERVICE_ACCOUNT_JSON = os.environ.get("GOOGLE_SERVICE_ACCOUNT_JSON")
GOOGLE_CLOUD_LOCATION = os.environ.get("GOOGLE_CLOUD_LOCATION", "us-central1")

TTS_MODEL = os.environ.get("TTS_MODEL", "gemini-2.5-flash-preview-tts")
TTS_TEMPERATURE = float(os.environ.get("TTS_TEMPERATURE", "0.3"))
DEFAULT_VOICE_NAME = os.environ.get("DEFAULT_VOICE_NAME", "Sadachbia")

# Rate-limit retry policy: constant delay, no jitter
TTS_MAX_RETRIES = int(os.environ.get("TTS_MAX_RETRIES", "3"))
TTS_RETRY_DELAY_MS = int(os.environ.get("TTS_RETRY_DELAY_MS", "30000"))

AUDIO_OUTPUT_DIR = os.environ.get("AUDIO_OUTPUT_DIR", "audio_outputs")
AUDIO_URL_PREFIX = os.environ.get("AUDIO_URL_PREFIX", "/audio")
