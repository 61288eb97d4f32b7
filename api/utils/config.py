import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_ENDPOINT = (
    "https://api.generativeai.googleapis.com/v1/models/{model}:generateContent"
)


@dataclass(frozen=True)
class UpstreamConfig:
    api_key: Optional[str]
    model: str
    endpoint: str
    timeout: Optional[float] = None


def _timeout_from_env() -> Optional[float]:
    raw = os.getenv("UPSTREAM_TIMEOUT", "").strip()
    if not raw:
        return None
    seconds = float(raw)
    return seconds if seconds > 0 else None


def load_config() -> UpstreamConfig:
    """Read upstream settings from the environment (set in the Vercel dashboard)."""
    api_key = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_GENERATIVE_AI_API_KEY")
    model = os.getenv("GEMINI_MODEL") or DEFAULT_MODEL
    endpoint = os.getenv("GEMINI_ENDPOINT") or DEFAULT_ENDPOINT.format(model=model)
    return UpstreamConfig(
        api_key=api_key or None,
        model=model,
        endpoint=endpoint,
        timeout=_timeout_from_env(),
    )
