"""CLI entry point for the contact extractor."""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from .config import DiscoveryMode, ExtractorSettings, resolve_api_key, resolve_llm_provider
from .extraction import LiteLLMClient, build_llm_config
from .leads import InMemoryLeadStore, save_extraction
from .link_discovery import normalize_root_url
from .scraper import DEFAULT_DELAY_S, Business, extract_multiple


def _ensure_utf8() -> None:
    """Ensure stdout/stderr use UTF-8 on Windows to avoid charmap errors."""
    if sys.platform == "win32":
        os.environ.setdefault("PYTHONUTF8", "1")
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contact-extractor",
        description="Find the best contact email and owner name on business websites",
    )
    parser.add_argument(
        "urls",
        nargs="*",
        help="One or more website URLs to search",
    )
    parser.add_argument(
        "--input",
        default=None,
        help='JSON file with a list of {"businessName", "website", "state"} objects',
    )
    parser.add_argument(
        "--name",
        default=None,
        help="Business name for positional URLs (default: the site's host name)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Process at most this many businesses",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help="LLM API key (or set OPENAI_API_KEY / ANTHROPIC_API_KEY)",
    )
    parser.add_argument(
        "--provider",
        default=None,
        help="litellm provider/model string (default: openai/gpt-4o-mini)",
    )
    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Skip the AI pass and use rule-based extraction only",
    )
    parser.add_argument(
        "--discovery",
        choices=[m.value for m in DiscoveryMode],
        default=None,
        help="Find secondary pages from homepage links or fixed path guesses (default: links)",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=DEFAULT_DELAY_S,
        help=f"Seconds to wait between businesses (default: {DEFAULT_DELAY_S})",
    )
    parser.add_argument(
        "--output",
        choices=["json", "table"],
        default="table",
        help="Output format (default: table)",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Run results through the lead validation gate and report save outcomes",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def load_businesses(args: argparse.Namespace, parser: argparse.ArgumentParser) -> list[Business]:
    businesses: list[Business] = []
    if args.input:
        try:
            with open(args.input, encoding="utf-8") as f:
                raw = json.load(f)
            businesses.extend(Business.model_validate(item) for item in raw)
        except (OSError, json.JSONDecodeError, TypeError, ValidationError) as e:
            parser.error(f"could not read --input {args.input}: {e}")

    for url in args.urls:
        name = args.name
        if not name:
            origin = normalize_root_url(url)
            name = origin.split("://", 1)[1] if origin else url
        businesses.append(Business(business_name=name, website=url))

    if args.limit is not None:
        businesses = businesses[: args.limit]
    return businesses


def main(argv: Optional[list[str]] = None) -> None:
    _ensure_utf8()
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.urls and not args.input:
        parser.error("give at least one URL or --input FILE")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    businesses = load_businesses(args, parser)
    settings = ExtractorSettings.from_env(
        discovery_mode=args.discovery,
        use_ai=False if args.no_ai else None,
    )

    llm = None
    if settings.use_ai:
        provider = args.provider or resolve_llm_provider()
        api_key = args.api_key or resolve_api_key(provider)
        if api_key:
            llm = LiteLLMClient(build_llm_config(api_key, provider=provider))

    results = asyncio.run(
        extract_multiple(businesses, llm=llm, settings=settings, delay_s=args.delay)
    )

    outcomes: list[Optional[str]] = [None] * len(results)
    if args.save:
        store = InMemoryLeadStore()
        outcomes = [
            save_extraction(store, b.business_name, r, state=b.state, website=b.website)
            for b, r in zip(businesses, results)
        ]

    if args.output == "json":
        output = []
        for business, result, outcome in zip(businesses, results, outcomes):
            row = {"businessName": business.business_name, **result.model_dump()}
            if outcome:
                row["saved"] = outcome
            output.append(row)
        print(json.dumps(output, indent=2))
    else:
        for business, result, outcome in zip(businesses, results, outcomes):
            print(f"\n{'='*60}")
            print(f"  Business:   {business.business_name}")
            print(f"  Site:       {result.url or 'N/A'}")
            print(f"  Pages:      {result.pages_crawled}")
            if result.errors:
                print(f"  Errors:     {len(result.errors)}")
            print(f"{'='*60}")
            print(f"  Email:      {result.email or 'N/A'}")
            print(f"  Owner:      {result.owner_name or 'N/A'}")
            print(f"  Title:      {result.owner_title or 'N/A'}")
            print(f"  Phone:      {result.phone or 'N/A'}")
            print(f"  Method:     {result.method} ({result.confidence or 'N/A'})")
            if outcome:
                print(f"  Saved:      {outcome}")

        found = sum(1 for r in results if r.email)
        print(f"\n{found}/{len(results)} businesses with an email.")


if __name__ == "__main__":
    main()
