import os
import tempfile

# main.py mounts the output directory at import time
os.environ.setdefault("AUDIO_OUTPUT_DIR", tempfile.mkdtemp(prefix="voiceover-test-"))
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("GOOGLE_SERVICE_ACCOUNT_JSON", None)
