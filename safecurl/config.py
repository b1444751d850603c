"""Runtime settings resolved from command-line flags and environment variables.

Flags take precedence over the environment. AI provider keys are only
detected and reported; analysis always uses the pattern catalog.
"""
from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .core.engine import DEFAULT_RULES_PATH

RULES_ENV = "SAFE_CURL_RULES"
TIMEOUT_ENV = "SAFE_CURL_TIMEOUT"
DEFAULT_TIMEOUT = 60.0

# Checked in order; the first key that is set wins, even if empty.
_PROVIDER_KEYS = [
    ("ANTHROPIC_API_KEY", "anthropic"),
    ("OPENAI_API_KEY", "openai"),
]


class ConfigError(Exception):
    """Raised when a setting has an invalid value."""


class AIProvider(enum.Enum):
    NONE = "none"
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


@dataclass
class Settings:
    rules_path: Path
    timeout: float
    ai_provider: AIProvider


def detect_ai_provider(environ: Mapping[str, str] | None = None) -> AIProvider:
    env = os.environ if environ is None else environ
    for key, provider in _PROVIDER_KEYS:
        if key in env:
            return AIProvider(provider)
    return AIProvider.NONE


def load_settings(
    rules: Path | None = None,
    timeout: float | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    env = os.environ if environ is None else environ

    if rules is not None:
        rules_path = Path(rules)
    elif env.get(RULES_ENV):
        rules_path = Path(env[RULES_ENV])
    else:
        rules_path = DEFAULT_RULES_PATH

    if timeout is None:
        raw = env.get(TIMEOUT_ENV)
        if raw:
            try:
                timeout = float(raw)
            except ValueError:
                raise ConfigError(f"{TIMEOUT_ENV} must be a number, got {raw!r}") from None
        else:
            timeout = DEFAULT_TIMEOUT
    if timeout <= 0:
        raise ConfigError(f"timeout must be positive, got {timeout}")

    return Settings(
        rules_path=rules_path,
        timeout=timeout,
        ai_provider=detect_ai_provider(env),
    )
