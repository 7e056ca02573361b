"""Test doubles for the google-genai streaming client."""

import base64

from google.genai import errors, types

PCM_MIME = "audio/L16;rate=24000"


def rate_limit_error() -> errors.ClientError:
    return errors.ClientError(
        429,
        {"error": {"code": 429, "message": "Resource has been exhausted", "status": "RESOURCE_EXHAUSTED"}},
    )


def audio_response(data: bytes, mime_type: str = PCM_MIME) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(
                    role="model",
                    parts=[types.Part(inline_data=types.Blob(data=data, mime_type=mime_type))],
                )
            )
        ]
    )


def text_response(text: str) -> types.GenerateContentResponse:
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=[types.Part(text=text)]))]
    )


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


async def aiter_of(items):
    """Yield items in order; an exception item is raised at that point of the stream."""
    for item in items:
        if isinstance(item, Exception):
            raise item
        yield item


class _FakeModels:
    def __init__(self, outcomes):
        self._outcomes = list(outcomes)
        self.calls = []

    async def generate_content_stream(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return aiter_of(outcome)


class _FakeAio:
    def __init__(self, models):
        self.models = models


class FakeClient:
    """Mimics client.aio.models.generate_content_stream().

    Each outcome is either an exception to raise or a list of responses to
    stream; the last outcome repeats once the others are used up.
    """

    def __init__(self, *outcomes):
        self.models = _FakeModels(outcomes)
        self.aio = _FakeAio(self.models)

    @property
    def calls(self):
        return self.models.calls
