import json
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from lingua_insights.config import Settings
from lingua_insights.llm_client import AiClient
from lingua_insights.schemas import TabularData

ENGLISH_TEXT = "Sales grow steadily; region B leads."
TRANSLATIONS = {
    "Hindi (हिंदी)": "बिक्री लगातार बढ़ रही है।",
    "Kannada (ಕನ್ನಡ)": "ಮಾರಾಟ ಸ್ಥಿರವಾಗಿ ಹೆಚ್ಚುತ್ತಿದೆ.",
    "Marathi (मराठी)": "विक्री सातत्याने वाढत आहे.",
}


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeUpload:
    """Stands in for FastAPI's UploadFile."""

    def __init__(self, content: bytes = b"", filename: str = "data.csv",
                 content_type: Optional[str] = "text/csv", size: Optional[int] = -1):
        self.content = content
        self.filename = filename
        self.content_type = content_type
        self.size = len(content) if size == -1 else size
        self.reads = 0

    async def read(self) -> bytes:
        self.reads += 1
        return self.content


def completion(text: str) -> Dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


class FakeGateway:
    """
    httpx handler that answers analysis prompts with ENGLISH_TEXT and
    translation prompts with the matching entry of TRANSLATIONS.
    `overrides` maps a prompt substring to a custom handler.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.overrides: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def prompt_of(self, request: httpx.Request) -> str:
        return json.loads(request.content)["messages"][0]["content"]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        prompt = self.prompt_of(request)
        for needle, handler in self.overrides.items():
            if needle in prompt:
                return handler(request)
        if prompt.startswith("Translate"):
            for label, text in TRANSLATIONS.items():
                if f"to {label}." in prompt:
                    return httpx.Response(200, json=completion(text))
            return httpx.Response(200, json=completion("translated"))
        if prompt.startswith("Analyze"):
            return httpx.Response(200, json=completion(ENGLISH_TEXT))
        return httpx.Response(200, json=completion("Column b sums to 6."))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def settings():
    return Settings(api_key="test-key", base_url="https://gateway.test/api/v1")


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(settings, gateway):
    return AiClient(settings, transport=gateway.transport)


@pytest.fixture
def small_data():
    return TabularData(headers=["a", "b"], rows=[["1", "2"], ["3", "4"]])
