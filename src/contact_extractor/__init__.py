"""contact-extractor: find the best contact email and owner name on business websites."""

from .config import DiscoveryMode, ExtractorSettings
from .models import ContactCandidate, EmailValidationVerdict, ExtractionResult, PageContent
from .scraper import Business, ContactExtractor, extract_multiple
from .validators import validate_email, validate_name, validate_phone

__all__ = [
    "Business",
    "ContactCandidate",
    "ContactExtractor",
    "DiscoveryMode",
    "EmailValidationVerdict",
    "ExtractionResult",
    "ExtractorSettings",
    "PageContent",
    "extract_multiple",
    "validate_email",
    "validate_name",
    "validate_phone",
]
