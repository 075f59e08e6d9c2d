import pytest

from contact_extractor.emails import (
    EmailDenylist,
    extract_emails,
    filter_emails,
    is_junk_email,
    select_best_email,
)

JUNK = [
    "x@sentry.io",
    "x@wixsite.com",
    "noreply@anything.com",
    "no-reply@acmerepair.com",
    "webmaster@acmerepair.com",
    "privacy@acmerepair.com",
    "legal@acmerepair.com",
    "press@acmerepair.com",
    "jobs@acmerepair.com",
    "admin@acmerepair.com",
    "logo@2x.png",
    "hero-image@banner.jpg",
    "user@example.com",
    "support@godaddy.com",
    "team@facebook.com",
    "123456@acmerepair.com",
    "jane@123.45.com",
    "jane@shop.c0m",
    "jane @acmerepair.com",
    "info@ acmerepair.com",
]

LEGIT = [
    "jane@shop.com",
    "jane.doe@acmerepair.com",
    "info@acmerepair.com",
    "contact@smithplumbing.net",
    "mike.owner@gmail.com",
    "bob_smith@yahoo.com",
    "service-desk@rvrepair.us",
    "hello@bestrv.co.uk",
    "sales@mobilerv.org",
    "tom.jones@outlook.com",
    "dispatch@rvtechs.biz",
    "j.doe2@repairshop.io",
]


@pytest.mark.parametrize("email", JUNK)
def test_junk_addresses_rejected(email):
    assert is_junk_email(email)
    assert extract_emails(f"Reach us at {email} today") == []


@pytest.mark.parametrize("email", LEGIT)
def test_legitimate_addresses_kept(email):
    assert not is_junk_email(email)
    assert extract_emails(f"Reach us at {email} today") == [email]


def test_extract_dedupes_case_insensitively_keeping_first_casing():
    text = "Jane.Doe@Shop.com or jane.doe@shop.com or bob@shop.com"
    assert extract_emails(text) == ["Jane.Doe@Shop.com", "bob@shop.com"]


def test_extract_empty_text():
    assert extract_emails("") == []
    assert extract_emails(None) == []


def test_denylist_is_configurable():
    denylist = EmailDenylist(junk_terms=("acmerepair",), generic_prefixes=())
    assert filter_emails(["webmaster@shop.com", "jane@acmerepair.com"], denylist) == [
        "webmaster@shop.com"
    ]


def test_personal_pattern_beats_role_mailbox():
    emails = ["info@acme.com", "jane.doe@acme.com"]
    assert select_best_email(emails, "Acme Repair") == "jane.doe@acme.com"


def test_business_slug_match_wins():
    emails = ["jane.doe@gmail.com", "info@acmerepair.com"]
    assert select_best_email(emails, "Acme Repair") == "info@acmerepair.com"


def test_role_mailbox_beats_unpersonal_leftovers():
    emails = ["x1234@shop.com", "contact@shop.com"]
    assert select_best_email(emails, "Unrelated Co") == "contact@shop.com"


def test_first_candidate_when_nothing_else_matches():
    emails = ["ab@shop.com", "a123@shop.com"]
    assert select_best_email(emails, "") == "ab@shop.com"


def test_discovery_order_breaks_ties():
    assert select_best_email(["mike@a.com", "sue@b.com"], "Zed") == "mike@a.com"
    assert select_best_email(["sue@b.com", "mike@a.com"], "Zed") == "sue@b.com"


def test_select_from_empty_list():
    assert select_best_email([], "Acme") is None
