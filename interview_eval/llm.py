"""Shared LLM / embedding client factories.

Every module that needs a chat or embedding model should import from
here instead of constructing its own client, ensuring consistent model
selection, temperature, retry and timeout configuration.

Chat models are built from ``settings.LLM_PROVIDERS`` in order.  Each
configured provider is wrapped with the same retry policy and the
remaining ones become its fallbacks, so callers see a single runnable.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI, OpenAIEmbeddings

import interview_eval.settings as settings
from interview_eval.errors import DependencyFailure

logger = logging.getLogger(__name__)


def _provider_model(provider: str, temperature: float, request_timeout: float) -> BaseChatModel:
    if provider == "openai":
        return ChatOpenAI(
            model=settings.LLM_MODEL_NAME,
            temperature=temperature,
            request_timeout=request_timeout,
            max_retries=0,
        )
    if provider == "groq":
        # Groq serves an OpenAI-compatible API
        return ChatOpenAI(
            model=settings.GROQ_MODEL_NAME,
            temperature=temperature,
            request_timeout=request_timeout,
            max_retries=0,
            base_url=settings.GROQ_BASE_URL,
            api_key=os.getenv("GROQ_API_KEY", "").strip(),
        )
    raise ValueError(f"Unknown LLM provider: {provider!r}")


def configured_providers() -> list[str]:
    """Providers from ``LLM_PROVIDERS`` whose API key is present, in order."""
    known = [p for p in settings.LLM_PROVIDERS if p in ("openai", "groq")]
    return [p for p in known if settings.provider_configured(p)]


def get_chat_llm(
    *,
    temperature: float = 0.7,
    request_timeout: float | None = None,
) -> Runnable:
    """Return a chat runnable: first provider with retry, the rest as fallbacks.

    Raises:
        DependencyFailure: no provider has an API key configured.
    """
    providers = configured_providers()
    if not providers:
        raise DependencyFailure("llm", "no LLM provider configured")

    timeout = request_timeout if request_timeout is not None else settings.REQUEST_TIMEOUT
    attempts = max(1, settings.LLM_MAX_RETRIES)
    chain = [
        _provider_model(p, temperature, timeout).with_retry(stop_after_attempt=attempts)
        for p in providers
    ]
    logger.debug("Chat providers: %s", ", ".join(providers))
    if len(chain) == 1:
        return chain[0]
    return chain[0].with_fallbacks(chain[1:])


def get_embeddings_model(
    *,
    request_timeout: float | None = None,
) -> OpenAIEmbeddings:
    """Return a configured OpenAIEmbeddings instance."""
    if not settings.provider_configured("openai"):
        raise DependencyFailure("embeddings", "OPENAI_API_KEY is not set")
    return OpenAIEmbeddings(
        model=settings.EMBEDDING_MODEL_NAME,
        request_timeout=(
            request_timeout if request_timeout is not None else settings.REQUEST_TIMEOUT
        ),
    )


def parse_json(raw: str) -> dict[str, Any]:
    """Parse JSON from model output, stripping markdown fences if needed."""
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1].rsplit("```", 1)[0]
    parsed = json.loads(text)
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def response_text(content: Any) -> str:
    """Normalize LangChain message content into a text string."""
    if isinstance(content, str):
        return content
    return json.dumps(content)


def invoke_text(messages: list[BaseMessage], *, temperature: float = 0.7) -> str:
    """Run the provider chain and return the reply text."""
    llm = get_chat_llm(temperature=temperature)
    try:
        response = llm.invoke(messages)
    except Exception as e:
        raise DependencyFailure("llm", str(e)) from e
    return response_text(response.content).strip()


def invoke_json(messages: list[BaseMessage], *, temperature: float = 0.2) -> dict[str, Any]:
    """Run the provider chain and parse the reply as a JSON object.

    Raises:
        DependencyFailure: no provider configured, or every provider failed.
        json.JSONDecodeError / ValueError: the reply is not a JSON object.
    """
    llm = get_chat_llm(temperature=temperature)
    try:
        response = llm.invoke(messages)
    except Exception as e:
        raise DependencyFailure("llm", str(e)) from e
    return parse_json(response_text(response.content))
