"""
LLM Router
==========
Decides which LLM provider the repair session talks to.

Routing Strategy:
    1. DeepSeek if DEEPSEEK_TOKEN is set
    2. GLM if GLM_API_KEY / GLM_TOKEN is set
    3. OpenAI if OPENAI_API_KEY is set
    4. None → generative repair is unavailable, rule table only

All three expose an OpenAI-compatible /chat/completions endpoint, so one
request shape covers every provider.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from app.core import config

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Provider Configuration
# ---------------------------------------------------------------------------
@dataclass
class ProviderConfig:
    """Configuration for a single LLM provider."""
    name: str
    api_key: str
    base_url: str
    model: str


def configured_providers() -> List[ProviderConfig]:
    """Return every provider with an API key, in preference order."""
    candidates = [
        ProviderConfig(
            name="deepseek",
            api_key=config.DEEPSEEK_TOKEN or "",
            base_url="https://api.deepseek.com/v1",
            model="deepseek-chat",
        ),
        ProviderConfig(
            name="glm",
            api_key=config.GLM_API_KEY or "",
            base_url="https://open.bigmodel.cn/api/paas/v4",
            model="glm-4-air",
        ),
        ProviderConfig(
            name="openai",
            api_key=config.OPENAI_API_KEY or "",
            base_url="https://api.openai.com/v1",
            model="gpt-4",
        ),
    ]
    return [p for p in candidates if p.api_key.strip()]


def select_provider() -> Optional[ProviderConfig]:
    """Pick the first configured provider, or None if no key is set."""
    providers = configured_providers()
    if not providers:
        logger.info("No LLM provider configured; generative repair disabled")
        return None
    logger.info("Using LLM provider: %s (%s)", providers[0].name, providers[0].model)
    return providers[0]
