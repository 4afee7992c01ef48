from core.request_context import (
    MAX_REQUEST_ID_LENGTH,
    NO_REQUEST,
    current_request_id,
    normalize_request_id,
    request_scope,
)


def test_outside_a_request():
    assert current_request_id() == NO_REQUEST


def test_scope_binds_and_restores():
    with request_scope("outer") as outer:
        assert current_request_id() == outer == "outer"
        with request_scope("inner"):
            assert current_request_id() == "inner"
        assert current_request_id() == "outer"
    assert current_request_id() == NO_REQUEST


def test_missing_id_is_generated():
    generated = normalize_request_id(None)
    assert len(generated) == 32
    assert normalize_request_id("   ") != generated


def test_id_is_clipped_and_filtered():
    assert normalize_request_id("a\nb<c>") == "abc"
    assert len(normalize_request_id("x" * 500)) == MAX_REQUEST_ID_LENGTH
