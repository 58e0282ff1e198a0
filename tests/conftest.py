from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Callable, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from pagespeed_analyzer.api import create_app
from pagespeed_analyzer.config import Settings


def completion(*contents: Optional[str]) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content)) for content in contents]
    )


class FakeCompletions:
    def __init__(self, response: Any = None, error: Optional[Exception] = None):
        self.response = response if response is not None else completion("## Report")
        self.error = error
        self.calls: list[dict] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class FakeGroq:
    def __init__(self, response: Any = None, error: Optional[Exception] = None):
        self.completions = FakeCompletions(response=response, error=error)
        self.chat = SimpleNamespace(completions=self.completions)


def mock_http_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def settings() -> Settings:
    return Settings(pagespeed_api_key="psi-key", groq_api_key="gsk-test", groq_model="test-model")


@pytest.fixture
def make_client(settings: Settings):
    def _make(
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
        llm: Optional[FakeGroq] = None,
    ) -> TestClient:
        handler = handler or (lambda request: httpx.Response(200, json={}))
        app = create_app(settings, http_client=mock_http_client(handler), llm_client=llm or FakeGroq())
        return TestClient(app)

    return _make


@pytest.fixture
def pagespeed_payload() -> dict:
    return {
        "id": "https://example.com/",
        "lighthouseResult": {
            "categories": {"performance": {"score": 0.873}},
            "audits": {
                "speed-index": {"title": "Speed Index", "displayValue": "1.9 s"},
                "render-blocking-resources": {
                    "title": "Eliminate render-blocking resources",
                    "description": "Resources are blocking the first paint of your page.",
                    "displayValue": "Potential savings of 420 ms",
                    "details": {"type": "opportunity", "overallSavingsMs": 420},
                },
                "largest-contentful-paint": {"title": "Largest Contentful Paint", "displayValue": "2.4 s"},
                "total-blocking-time": {"title": "Total Blocking Time", "displayValue": "150 ms"},
                "unused-css-rules": {
                    "title": "Reduce unused CSS",
                    "description": "Reduce unused rules from stylesheets.",
                    "displayValue": "",
                    "details": {"type": "opportunity", "overallSavingsMs": 0},
                },
                "cumulative-layout-shift": {"title": "Cumulative Layout Shift", "displayValue": "0.02"},
                "first-contentful-paint": {"title": "First Contentful Paint", "displayValue": "0.8 s"},
                "uses-text-compression": {
                    "title": "Enable text compression",
                    "description": "Text-based resources should be served with compression.",
                    "details": {"type": "opportunity", "overallSavingsMs": 150},
                },
                "dom-size": {
                    "title": "Avoid an excessive DOM size",
                    "displayValue": "900 elements",
                    "details": {"type": "table", "overallSavingsMs": 300},
                },
                "critical-request-chains": {
                    "details": {
                        "type": "criticalrequestchain",
                        "chains": {
                            "A1": {"duration": 500, "children": {"B1": {}, "B2": {}}},
                            "A2": {"duration": 1200, "children": {}},
                        },
                    }
                },
                "resource-summary": {
                    "details": {
                        "type": "table",
                        "items": [
                            {"label": "Total", "requestCount": 24, "transferSize": 153600},
                            {"label": "Script", "requestCount": 8, "transferSize": 51300},
                        ],
                    }
                },
            },
        },
    }
