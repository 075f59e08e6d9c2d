from contact_extractor.owners import extract_owner_name


def test_owner_colon_pattern():
    assert extract_owner_name("Family run shop. Owner: Jane Smith. Open daily.") == "Jane Smith"


def test_founded_by_pattern():
    assert extract_owner_name("Founded by Mark Twain in 1998") == "Mark Twain"


def test_first_pattern_in_list_wins_over_earlier_text():
    text = "CEO: Alice Walker and later Owner: Bob Stone"
    assert extract_owner_name(text) == "Bob Stone"


def test_tags_are_stripped_before_matching():
    html = "<div><strong>President:</strong> <span>Carl Sagan</span></div>"
    assert extract_owner_name(html) == "Carl Sagan"


def test_name_containing_contact_is_rejected():
    assert extract_owner_name("Owner: Contact Us") is None


def test_falls_through_to_next_pattern_when_rejected():
    text = "Owner: Contact Today. General Manager: Dana Scully"
    assert extract_owner_name(text) == "Dana Scully"


def test_no_match():
    assert extract_owner_name("We fix RVs of all kinds.") is None
    assert extract_owner_name("") is None
    assert extract_owner_name(None) is None
