import pytest
from fastapi.testclient import TestClient

from eli5.errors import UpstreamError
import eli5.proxy as proxy_module
from eli5.proxy import app, get_generator


class EchoGenerator:
    def __init__(self):
        self.calls = []

    def generate(self, prompt, history):
        self.calls.append((prompt, history))
        return f"Simply put: {prompt}"


class BrokenGenerator:
    def generate(self, prompt, history):
        raise UpstreamError("429 quota exhausted")


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def use(generator):
    app.dependency_overrides[get_generator] = lambda: generator
    return generator


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_generate_returns_text_and_passes_history(client):
    generator = use(EchoGenerator())

    resp = client.post(
        "/generate",
        json={
            "prompt": "gravity",
            "history": [
                {"role": "user", "content": "hello"},
                {"role": "model", "content": "hi there"},
            ],
        },
    )

    assert resp.status_code == 200
    assert resp.json() == {"text": "Simply put: gravity"}
    prompt, history = generator.calls[0]
    assert prompt == "gravity"
    assert [(m.role, m.content) for m in history] == [
        ("user", "hello"), ("model", "hi there"),
    ]


@pytest.mark.parametrize("body", [{}, {"prompt": ""}, {"prompt": "   ", "history": []}])
def test_missing_prompt(client, body):
    generator = use(EchoGenerator())

    resp = client.post("/generate", json=body)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing prompt"}
    assert generator.calls == []


def test_generator_failure_returns_500_with_message(client):
    use(BrokenGenerator())

    resp = client.post("/generate", json={"prompt": "hi"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "429 quota exhausted"}


def test_missing_api_key_returns_json_error(client, monkeypatch):
    monkeypatch.setattr(proxy_module.settings, "GEMINI_API_KEY", "")
    get_generator.cache_clear()
    try:
        resp = client.post("/generate", json={"prompt": "hi"})
    finally:
        get_generator.cache_clear()

    assert resp.status_code == 500
    assert resp.json() == {"error": "Missing GEMINI_API_KEY"}
