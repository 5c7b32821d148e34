"""
AI Client - text generation for network insights.

Backends:
    claude             Anthropic Messages API (anthropic SDK)
    deepseek-chat      DeepSeek chat completions (OpenAI-compatible, via requests)
    deepseek-reasoner  same endpoint; only the final answer is returned

Every backend raises ValueError when its API key is missing and RuntimeError
when the call itself fails, so callers can fall back with one except clause.
"""

import logging
from typing import Callable, Dict, Optional

import requests
from anthropic import Anthropic

from partnerhub.config import config

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM = "You are a business analyst advising a real-estate partnership hub."

_DEEPSEEK_READ_TIMEOUT = 120


def _require_key(value: str, name: str) -> str:
    if not value:
        raise ValueError(f"{name} not set in environment")
    return value


# =============================================================================
# CLAUDE
# =============================================================================

def call_claude(prompt: str, system: Optional[str] = None, max_tokens: int = 2000) -> str:
    """Text blocks of the Claude reply, joined."""
    client = Anthropic(api_key=_require_key(config.ANTHROPIC_API_KEY, 'ANTHROPIC_API_KEY'))

    logger.debug(f"Claude request: model={config.CLAUDE_MODEL} prompt_chars={len(prompt)}")
    try:
        message = client.messages.create(
            model=config.CLAUDE_MODEL,
            max_tokens=max_tokens,
            system=system or DEFAULT_SYSTEM,
            messages=[{"role": "user", "content": prompt}],
        )
    except Exception as e:
        logger.error(f"Claude API error: {e}")
        raise RuntimeError(f"Failed to call Claude API: {e}")

    text = "".join(getattr(block, 'text', '') for block in message.content).strip()
    if not text:
        raise RuntimeError("Claude returned an empty reply")
    return text


# =============================================================================
# DEEPSEEK
# =============================================================================

def call_deepseek(
    prompt: str,
    model: str = 'deepseek-chat',
    system: Optional[str] = None,
    max_tokens: int = 2000,
) -> str:
    """Final answer of a DeepSeek completion; reasoner chain-of-thought is dropped."""
    api_key = _require_key(config.DEEPSEEK_API_KEY, 'DEEPSEEK_API_KEY')

    payload = {
        "model": model,
        "messages": [
            {"role": "system", "content": system or DEFAULT_SYSTEM},
            {"role": "user", "content": prompt},
        ],
        "max_tokens": max_tokens,
        "stream": False,
    }
    # the reasoner rejects sampling parameters
    if model == 'deepseek-chat':
        payload.update(temperature=0.7, top_p=0.9)

    logger.debug(f"DeepSeek request: model={model} prompt_chars={len(prompt)}")
    try:
        response = requests.post(
            f"{config.DEEPSEEK_BASE_URL}/chat/completions",
            json=payload,
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
            timeout=(config.HTTP_TIMEOUT_SECONDS, _DEEPSEEK_READ_TIMEOUT),
        )
        response.raise_for_status()
        message = response.json()['choices'][0]['message']
    except requests.exceptions.RequestException as e:
        logger.error(f"DeepSeek API error: {e}")
        raise RuntimeError(f"Failed to call DeepSeek API: {e}")
    except (KeyError, IndexError, ValueError) as e:
        logger.error(f"DeepSeek response parse error: {e}")
        raise RuntimeError(f"Unexpected DeepSeek response format: {e}")

    return (message.get('content') or '').strip()


# =============================================================================
# ROUTER
# =============================================================================

def _deepseek(model: str) -> Callable[..., str]:
    def call(prompt, system=None, max_tokens=2000):
        return call_deepseek(prompt, model=model, system=system, max_tokens=max_tokens)
    return call


_BACKENDS: Dict[str, Callable[..., str]] = {
    'claude': lambda prompt, system=None, max_tokens=2000: call_claude(prompt, system=system, max_tokens=max_tokens),
    'deepseek-chat': _deepseek('deepseek-chat'),
    'deepseek-reasoner': _deepseek('deepseek-reasoner'),
}

MODEL_CHOICES = list(_BACKENDS)


def call_ai(prompt: str, model: str, system: Optional[str] = None, max_tokens: int = 2000) -> str:
    """
    Route a prompt to one backend.

    Args:
        model: One of MODEL_CHOICES
    Raises:
        ValueError: unknown model or missing API key
        RuntimeError: backend call failed
    """
    backend = _BACKENDS.get(model)
    if backend is None:
        raise ValueError(f"Unknown AI model '{model}'. Choose from: {', '.join(MODEL_CHOICES)}")
    return backend(prompt, system=system, max_tokens=max_tokens)
