from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Iterator, List, Protocol

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0

Message = Dict[str, str]


class MissingCredentialError(RuntimeError):
    """No API key/token was supplied for the selected provider."""


class CollaboratorError(RuntimeError):
    """The language model could not be reached or returned unusable output."""


class LLMClient(Protocol):
    def chat(self, prompt: str, *, max_retries: int = 3) -> str: ...

    def chat_json(self, prompt: str, *, max_retries: int = 3) -> Dict[str, Any]: ...

    def stream(self, messages: List[Message]) -> Iterator[str]: ...


class OpenAIClient:
    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = DEFAULT_TIMEOUT):
        if not (api_key or "").strip():
            raise MissingCredentialError("OpenAI API key required.")
        try:
            import openai  # type: ignore
        except Exception as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "openai package is required. Install with `pip install openai`."
            ) from exc

        self.model = model
        self.client = openai.OpenAI(api_key=api_key, timeout=timeout)

    def chat(self, prompt: str, *, max_retries: int = 3) -> str:
        messages = [{"role": "user", "content": prompt}]

        def call() -> str:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0.2,
            )
            return resp.choices[0].message.content or ""

        return _with_retries(call, "OpenAI", max_retries=max_retries, rate_limit_wait=60.0)

    def chat_json(self, prompt: str, *, max_retries: int = 3) -> Dict[str, Any]:
        return _chat_json(self, prompt, max_retries=max_retries)

    def stream(self, messages: List[Message]) -> Iterator[str]:
        try:
            chunks = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0.7,
                stream=True,
            )
            for chunk in chunks:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        except Exception as exc:  # pragma: no cover - network call
            raise CollaboratorError(f"OpenAI stream failed: {exc}") from exc


class HuggingFaceClient:
    def __init__(self, api_token: str, model: str, timeout: float = DEFAULT_TIMEOUT):
        if not (api_token or "").strip():
            raise MissingCredentialError("Hugging Face token required.")
        try:
            from huggingface_hub import InferenceClient  # type: ignore
        except Exception as exc:  # pragma: no cover - import guard
            raise RuntimeError(
                "huggingface_hub package is required. Install with `pip install huggingface_hub`."
            ) from exc

        self.client = InferenceClient(model=model, token=api_token, timeout=timeout)
        self.model = model

    def chat(self, prompt: str, *, max_retries: int = 3) -> str:
        def call() -> str:
            return self.client.text_generation(
                prompt,
                max_new_tokens=1024,
                temperature=0.2,
                do_sample=False,
                return_full_text=False,
            )

        return _with_retries(call, "Hugging Face", max_retries=max_retries, rate_limit_wait=30.0)

    def chat_json(self, prompt: str, *, max_retries: int = 3) -> Dict[str, Any]:
        return _chat_json(self, prompt, max_retries=max_retries)

    def stream(self, messages: List[Message]) -> Iterator[str]:
        try:
            for chunk in self.client.chat_completion(messages, max_tokens=500, stream=True):
                delta = chunk.choices[0].delta.content if chunk.choices else None
                if delta:
                    yield delta
        except Exception as exc:  # pragma: no cover - network call
            raise CollaboratorError(f"Hugging Face stream failed: {exc}") from exc


def build_client(provider: str, api_key: str, model: str, timeout: float = DEFAULT_TIMEOUT) -> LLMClient:
    normalized = provider.strip().lower()
    if normalized in {"openai", "open ai"}:
        return OpenAIClient(api_key=api_key, model=model, timeout=timeout)
    if normalized in {"huggingface", "hugging face", "hugging face (inference api)"}:
        return HuggingFaceClient(api_token=api_key, model=model, timeout=timeout)
    raise ValueError(f"Unknown provider: {provider}")


def _with_retries(call, provider: str, *, max_retries: int, rate_limit_wait: float) -> str:
    delay = 1.0
    last_error: Exception | None = None
    for attempt in range(max_retries):
        try:
            return call()
        except Exception as exc:  # pragma: no cover - network call
            last_error = exc
            if _is_rate_limit_error(exc):
                logger.warning(
                    "%s rate limit encountered (attempt %s). Waiting %.1fs",
                    provider,
                    attempt + 1,
                    rate_limit_wait,
                )
                time.sleep(rate_limit_wait)
            else:
                logger.warning("%s call failed (attempt %s): %s", provider, attempt + 1, exc)
                time.sleep(delay)
            delay *= 2
    raise CollaboratorError(f"{provider} call failed after retries: {last_error}")


def _chat_json(client: LLMClient, prompt: str, *, max_retries: int) -> Dict[str, Any]:
    raw = client.chat(prompt, max_retries=max_retries)
    parsed = _safe_json_parse(raw)
    if parsed is not None:
        return parsed

    # Ask model to repair the JSON if parsing failed.
    repair_prompt = (
        "The previous response was invalid JSON. "
        "Return ONLY valid JSON that fixes it without adding new facts.\n"
        f"Original response:\n{raw}"
    )
    repaired_raw = client.chat(repair_prompt, max_retries=max_retries)
    repaired = _safe_json_parse(repaired_raw)
    if repaired is None:
        raise CollaboratorError("Model did not return valid JSON after repair attempt")
    return repaired


def _safe_json_parse(text: str) -> Dict[str, Any] | None:
    # Attempt direct parse
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    # Try to extract JSON object if wrapped in text or a code fence.
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        snippet = text[start : end + 1]
        try:
            parsed = json.loads(snippet)
        except json.JSONDecodeError:
            return None
        return parsed if isinstance(parsed, dict) else None
    return None


def _is_rate_limit_error(exc: Exception) -> bool:
    msg = str(exc).lower()
    if "rate limit" in msg or "rate_limit" in msg:
        return True
    if hasattr(exc, "status_code") and getattr(exc, "status_code") == 429:
        return True
    return False
