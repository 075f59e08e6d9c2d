"""Runtime settings for the contact extraction pipeline."""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from .emails import EmailDenylist

logger = logging.getLogger(__name__)

ENV_PREFIX = "CONTACT_EXTRACTOR_"

DEFAULT_LLM_PROVIDER = "openai/gpt-4o-mini"

# Provider prefix (litellm style) -> environment variable holding its key.
PROVIDER_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "groq": "GROQ_API_KEY",
    "gemini": "GEMINI_API_KEY",
}


class DiscoveryMode(str, Enum):
    """How secondary pages are found after the homepage."""

    LINKS = "links"
    PATHS = "paths"


class ExtractorSettings(BaseModel):
    """Every tunable of a single extraction run."""

    homepage_timeout_ms: int = Field(default=15000, gt=0)
    page_timeout_ms: int = Field(default=10000, gt=0)
    discovery_mode: DiscoveryMode = DiscoveryMode.LINKS
    max_link_pages: int = Field(default=5, ge=0)
    early_stop: bool = False
    page_delay_s: float = Field(default=0.0, ge=0)
    business_deadline_s: Optional[float] = Field(default=120.0, gt=0)

    use_ai: bool = True
    min_ai_chars: int = Field(default=100, ge=0)
    ai_max_chars: int = Field(default=40000, gt=0)
    ai_max_tokens: int = Field(default=600, gt=0)
    ai_timeout_s: float = Field(default=25.0, gt=0)

    denylist: EmailDenylist = Field(default_factory=EmailDenylist)

    @classmethod
    def from_env(cls, environ: Optional[dict] = None, **overrides) -> ExtractorSettings:
        """Build settings from ``CONTACT_EXTRACTOR_<FIELD>`` variables.

        Denylist entries are comma separated
        (``CONTACT_EXTRACTOR_JUNK_TERMS``, ``CONTACT_EXTRACTOR_GENERIC_PREFIXES``).
        Explicit keyword overrides win over the environment.
        """
        environ = os.environ if environ is None else environ
        values: dict = {}
        for name in cls.model_fields:
            if name == "denylist":
                continue
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw

        denylist: dict = {}
        for name in EmailDenylist.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw:
                denylist[name] = tuple(t.strip().lower() for t in raw.split(",") if t.strip())
        if denylist:
            values["denylist"] = EmailDenylist(**denylist)

        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid {ENV_PREFIX}* settings: {e}")
            return cls.model_validate({k: v for k, v in overrides.items() if v is not None})


def resolve_llm_provider(environ: Optional[dict] = None) -> str:
    environ = os.environ if environ is None else environ
    return environ.get(f"{ENV_PREFIX}LLM_PROVIDER") or DEFAULT_LLM_PROVIDER


def resolve_api_key(provider: str, environ: Optional[dict] = None) -> Optional[str]:
    """Look up the API key for a litellm-style provider string."""
    environ = os.environ if environ is None else environ
    explicit = environ.get(f"{ENV_PREFIX}LLM_API_KEY")
    if explicit:
        return explicit
    prefix = provider.split("/", 1)[0].lower()
    env_name = PROVIDER_KEY_ENV.get(prefix)
    return environ.get(env_name) if env_name else None
