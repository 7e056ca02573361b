#!/usr/bin/env python3
"""
Voiceover Generator — command line

Synthesizes one voiceover with Gemini TTS and writes the audio files to
<output-dir>/<request-id>/audio_output_<n>.<ext>.

Requires GEMINI_API_KEY (or GOOGLE_SERVICE_ACCOUNT_JSON) in the environment.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict

from pipeline import generate_voiceover

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Generate a voiceover with Gemini TTS")
    parser.add_argument("--input", required=True, help="Path to a text file or raw text")
    parser.add_argument("--voice", default=None, help="Prebuilt voice name (default from DEFAULT_VOICE_NAME)")
    parser.add_argument("--emotion", default=None, help="Emotion annotation prepended to the prompt")
    parser.add_argument("--output-dir", default=None, help="Output directory (default from AUDIO_OUTPUT_DIR)")
    parser.add_argument("--result-file", default=None, help="Path to write JSON result")
    args = parser.parse_args()

    if os.path.isfile(args.input):
        with open(args.input, "r") as f:
            text = f.read()
    else:
        text = args.input

    if not text.strip():
        logger.error("Empty input text")
        sys.exit(1)

    logger.info(f"Input: {len(text)} characters")

    result = asyncio.run(
        generate_voiceover(text, voice_name=args.voice, emotion=args.emotion, output_dir=args.output_dir)
    )

    for saved in result.files:
        logger.info(f"Wrote {saved.path} ({saved.size_bytes} bytes)")

    if args.result_file:
        with open(args.result_file, "w") as rf:
            json.dump(asdict(result), rf, indent=2)


if __name__ == "__main__":
    main()
