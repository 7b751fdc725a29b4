import pytest

from llm import credentials
from llm.client import MissingCredentialError


@pytest.fixture(autouse=True)
def no_stored_key(monkeypatch):
    monkeypatch.setattr(credentials, "load_api_key", lambda: None)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("HF_TOKEN", raising=False)


def test_explicit_key_wins(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "from-env")
    assert credentials.resolve_api_key("OpenAI", " typed ") == "typed"


def test_environment_key_per_provider(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("HF_TOKEN", "hf-env")
    assert credentials.resolve_api_key("OpenAI") == "sk-env"
    assert credentials.resolve_api_key("Hugging Face (Inference API)") == "hf-env"


def test_stored_key_used_last(monkeypatch):
    monkeypatch.setattr(credentials, "load_api_key", lambda: "stored")
    assert credentials.resolve_api_key("OpenAI", "") == "stored"


def test_missing_key_is_actionable_error():
    with pytest.raises(MissingCredentialError) as excinfo:
        credentials.resolve_api_key("OpenAI")
    assert "OPENAI_API_KEY" in str(excinfo.value)
