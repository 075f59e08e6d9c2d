from unittest.mock import patch

from contact_extractor.config import (
    DEFAULT_LLM_PROVIDER,
    DiscoveryMode,
    ExtractorSettings,
    resolve_api_key,
    resolve_llm_provider,
)
from contact_extractor.resources import ResourceMonitor


def test_defaults():
    settings = ExtractorSettings()
    assert settings.discovery_mode == DiscoveryMode.LINKS
    assert settings.min_ai_chars == 100
    assert settings.max_link_pages == 5
    assert "noreply" in settings.denylist.generic_prefixes


def test_from_env_reads_prefixed_variables():
    env = {
        "CONTACT_EXTRACTOR_DISCOVERY_MODE": "paths",
        "CONTACT_EXTRACTOR_PAGE_TIMEOUT_MS": "8000",
        "CONTACT_EXTRACTOR_USE_AI": "false",
        "CONTACT_EXTRACTOR_JUNK_TERMS": "Sentry, wixsite ,",
        "UNRELATED": "x",
    }
    settings = ExtractorSettings.from_env(env)
    assert settings.discovery_mode == DiscoveryMode.PATHS
    assert settings.page_timeout_ms == 8000
    assert settings.use_ai is False
    assert settings.denylist.junk_terms == ("sentry", "wixsite")


def test_overrides_beat_environment_and_none_is_ignored():
    env = {"CONTACT_EXTRACTOR_MAX_LINK_PAGES": "2"}
    settings = ExtractorSettings.from_env(env, max_link_pages=4, use_ai=None)
    assert settings.max_link_pages == 4
    assert settings.use_ai is True


def test_invalid_environment_falls_back_to_defaults():
    settings = ExtractorSettings.from_env({"CONTACT_EXTRACTOR_PAGE_TIMEOUT_MS": "soon"})
    assert settings.page_timeout_ms == 10000


def test_llm_provider_and_key_resolution():
    assert resolve_llm_provider({}) == DEFAULT_LLM_PROVIDER
    assert resolve_llm_provider({"CONTACT_EXTRACTOR_LLM_PROVIDER": "anthropic/claude-sonnet-4-20250514"}).startswith("anthropic/")
    assert resolve_api_key("openai/gpt-4o-mini", {"OPENAI_API_KEY": "sk-1"}) == "sk-1"
    assert resolve_api_key("anthropic/claude", {"OPENAI_API_KEY": "sk-1"}) is None
    assert resolve_api_key("anthropic/claude", {"CONTACT_EXTRACTOR_LLM_API_KEY": "k"}) == "k"


def test_resource_monitor_pressure():
    class Mem:
        percent = 91.0
        available = 4 * 1024 * 1024 * 1024

    with patch("contact_extractor.resources.psutil.virtual_memory", return_value=Mem()):
        monitor = ResourceMonitor(max_memory_percent=85.0)
        assert monitor.under_pressure()
        assert monitor.get_snapshot()["memory_available_mb"] == 4096

    Mem.percent = 40.0
    with patch("contact_extractor.resources.psutil.virtual_memory", return_value=Mem()):
        assert not ResourceMonitor().under_pressure()
