from nearby.normalize import (
    base_identity,
    normalize_title,
    title_similarity,
    title_tokens,
    titles_similar,
)


def test_base_identity_strips_size_and_variant_suffixes():
    assert base_identity("art-x-40x60") == "art-x"
    assert base_identity("art-x-variant-2") == "art-x"
    assert base_identity("art-x-v-3-large") == "art-x"


def test_base_identity_strips_medium_markers():
    assert base_identity("harbour-at-dusk-original-painting") == "harbour-at-dusk"
    assert base_identity("harbour-at-dusk-print") == "harbour-at-dusk"
    assert base_identity("harbour-at-dusk-canvas") == "harbour-at-dusk"
    assert base_identity("harbour-at-dusk-paper") == "harbour-at-dusk"
    # stacked size + medium
    assert base_identity("harbour-at-dusk-40x60-print") == "harbour-at-dusk"


def test_base_identity_leaves_unknown_suffixes():
    assert base_identity("harbour-at-dusk-limited") == "harbour-at-dusk-limited"
    assert base_identity("printmaker-studio") == "printmaker-studio"


def test_base_identity_handles_missing_handle():
    assert base_identity(None) == ""
    assert base_identity("") == ""


def test_base_identity_is_idempotent():
    handles = [
        "art-x-40x60",
        "art-x-variant-2",
        "a-40x60-print",
        "b-print-canvas",
        "c-canvas-30x40",
        "plain-handle",
        "",
        "weird--print",
    ]
    for h in handles:
        once = base_identity(h)
        assert base_identity(once) == once


def test_title_tokens_drop_short_tokens():
    assert title_tokens("A Day at the Sea") == ["day", "the", "sea"]
    assert normalize_title("  Sunset Over Paris ") == "sunset over paris"


def test_title_similarity_ratio():
    # tokens: {sunset, over, paris} vs {sunset, over, rome}: 2*2 / 6
    assert abs(title_similarity("Sunset over Paris", "Sunset over Rome") - 4 / 6) < 1e-9
    assert title_similarity("", "") == 0.0


def test_titles_similar_exact_match_after_normalisation():
    assert titles_similar("Sunset Over Paris", "sunset over paris ")


def test_titles_similar_threshold_and_token_order():
    assert titles_similar("Paris Sunset Over Seine", "Sunset Over Paris Seine")
    assert not titles_similar("Sunset over Paris", "Sunset over Rome")
    # a lower threshold lets the partial overlap through
    assert titles_similar("Sunset over Paris", "Sunset over Rome", threshold=0.6)


def test_empty_titles_never_similar():
    assert not titles_similar("", "")
    assert not titles_similar(None, "Sunset")
    assert not titles_similar("   ", "   ")


def test_title_similarity_is_symmetric_with_repeated_tokens():
    a, b = "Paris Paris Paris Paris", "Paris Sunset Over Seine River"
    # one shared "paris": 2*1 / (4+5)
    assert abs(title_similarity(a, b) - 2 / 9) < 1e-9
    assert title_similarity(a, b) == title_similarity(b, a)
    assert not titles_similar(a, b)
    assert not titles_similar(b, a)


def test_title_similarity_never_exceeds_one():
    assert title_similarity("Seine Seine Seine", "Seine") <= 1.0
    assert title_similarity("Seine Seine", "Seine Seine") == 1.0
