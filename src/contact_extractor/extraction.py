"""AI-assisted contact extraction: prompt building, model call, reply parsing."""

import asyncio
import json
import logging
import re
from typing import Optional, Protocol

import litellm
from crawl4ai import LLMConfig
from pydantic import ValidationError

from .config import DEFAULT_LLM_PROVIDER, ExtractorSettings
from .models import AIExtraction

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """\
Extract contact information from this business website.

Business Name: {business_name}
Website: {website_url}

Website Content:
---
{content}
---

Extract:
1. Email addresses - look for mailto: links, plain emails, AND obfuscated \
formats like:
   - "info [at] company [dot] com"
   - "email: info(at)company.com"
   - "contact AT company DOT com"
   Write obfuscated addresses back in normal form (info@company.com).

2. Owner/decision-maker - look for names with titles like:
   - Owner, President, CEO, Founder, General Manager, Director
   - "Founded by...", "Meet the owner...", "About us" sections

3. Phone numbers - primary business phone

Pick as bestEmail the address most likely to reach the owner or the \
business directly. Never invent an address, name or number that does not \
appear in the content.

Respond in this exact JSON format:
{{
  "emails": ["email1@example.com"],
  "bestEmail": "email1@example.com",
  "ownerName": "John Smith",
  "ownerTitle": "Owner",
  "phone": "555-123-4567",
  "confidence": "high|medium|low|none",
  "notes": "brief explanation"
}}

If a field is not found, use null. Only return valid JSON.\
"""

# Greedy on purpose: spans from the first "{" to the last "}".
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class LLMClient(Protocol):
    """Opaque language-model call: prompt text in, raw reply text out."""

    async def complete(self, prompt: str, max_tokens: int) -> str:
        ...


def build_llm_config(
    api_token: str,
    provider: str = DEFAULT_LLM_PROVIDER,
    base_url: Optional[str] = None,
) -> LLMConfig:
    """Build the model configuration for contact extraction."""
    return LLMConfig(
        provider=provider,
        api_token=api_token,
        base_url=base_url,
        temperature=0.0,
    )


class LiteLLMClient:
    """LLMClient backed by litellm, configured from a crawl4ai LLMConfig."""

    def __init__(self, llm_config: LLMConfig) -> None:
        self.llm_config = llm_config

    async def complete(self, prompt: str, max_tokens: int) -> str:
        response = await litellm.acompletion(
            model=self.llm_config.provider,
            messages=[{"role": "user", "content": prompt}],
            api_key=self.llm_config.api_token,
            base_url=self.llm_config.base_url,
            temperature=self.llm_config.temperature,
            max_tokens=max_tokens,
        )
        return response.choices[0].message.content or ""


def build_prompt(content: str, business_name: str, website_url: str, max_chars: int) -> str:
    """Embed page text in the extraction prompt, keeping only the first max_chars."""
    return EXTRACTION_PROMPT.format(
        business_name=business_name,
        website_url=website_url,
        content=content[:max_chars],
    )


def parse_ai_response(text: Optional[str]) -> Optional[AIExtraction]:
    """Parse the model reply, tolerating prose around the JSON object.

    Returns None if no JSON object can be recovered.
    """
    if not text or not text.strip():
        return None

    text = text.strip()
    match = _JSON_OBJECT.search(text)
    candidates = [match.group(0)] if match else []
    candidates.append(text)

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if not isinstance(data, dict):
            continue
        try:
            return AIExtraction.model_validate(data)
        except ValidationError as e:
            logger.debug(f"AI reply did not fit the contact schema: {e}")
            return None
    return None


class AIExtractionAdapter:
    """Runs one model call over accumulated page text.

    Any failure (model error, timeout, unparseable reply) is reported as
    None so the caller can fall back to rule-based extraction. There are
    no retries.
    """

    def __init__(self, llm: LLMClient, settings: Optional[ExtractorSettings] = None) -> None:
        self.llm = llm
        self.settings = settings or ExtractorSettings()

    async def extract(
        self,
        content: str,
        business_name: str,
        website_url: str,
    ) -> Optional[AIExtraction]:
        prompt = build_prompt(content, business_name, website_url, self.settings.ai_max_chars)
        try:
            reply = await asyncio.wait_for(
                self.llm.complete(prompt, max_tokens=self.settings.ai_max_tokens),
                timeout=self.settings.ai_timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"AI extraction timed out after {self.settings.ai_timeout_s}s for {website_url}"
            )
            return None
        except Exception as e:
            logger.warning(f"AI extraction error for {website_url}: {e}")
            return None

        parsed = parse_ai_response(reply if isinstance(reply, str) else None)
        if parsed is None:
            logger.warning(f"Could not parse AI response for {website_url}")
        return parsed
