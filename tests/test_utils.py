# tests/test_utils.py

"""
Tests for payload sanitizing, product summaries and Supabase error mapping.
"""

from core.errors import extract_supabase_error_code, handle_supabase_error, is_unique_violation
from core.utils import sanitize, summarize_products
from tests.fake_supabase import FakeAPIError


def test_sanitize_strips_and_blanks_strings():
    cleaned = sanitize({"name": "  Adama Hospital ", "code": "0042", "wereda": "   ", "capacity": 0})

    assert cleaned == {"name": "Adama Hospital", "code": "0042", "wereda": None, "capacity": 0}


def test_summarize_products():
    rows = [
        {"product_category": "antibiotics", "quantity": 10, "price": 2.5},
        {"product_category": "antibiotics", "quantity": 4, "price": 1.25},
        {"product_category": "vaccines", "quantity": 3, "price": None},
        {"product_category": None, "quantity": None, "price": 7},
    ]

    summary = summarize_products(rows)

    assert summary["product_count"] == 4
    assert summary["total_quantity"] == 17
    assert summary["total_value"] == 30.0
    assert summary["average_price"] == round((2.5 + 1.25 + 7) / 3, 2)
    assert list(summary["by_category"]) == ["antibiotics", "uncategorized", "vaccines"]
    assert summary["by_category"]["antibiotics"] == {
        "product_count": 2, "total_quantity": 14, "total_value": 30.0,
    }
    assert summary["by_category"]["uncategorized"]["total_value"] == 0.0


def test_summarize_no_products():
    summary = summarize_products([])

    assert summary["product_count"] == 0
    assert summary["total_value"] == 0
    assert summary["average_price"] is None
    assert summary["by_category"] == {}


def test_error_code_extraction():
    assert extract_supabase_error_code(FakeAPIError("dup", code="23505")) == "23505"
    assert extract_supabase_error_code(Exception({"code": "42501", "message": "denied"})) == "42501"
    assert extract_supabase_error_code(Exception("plain")) is None


def test_unique_violation_detection():
    assert is_unique_violation(FakeAPIError("whatever", code="23505"))
    assert is_unique_violation(Exception("duplicate key value violates unique constraint"))
    assert not is_unique_violation(Exception("timeout"))


def test_handle_supabase_error_status_mapping():
    assert handle_supabase_error(FakeAPIError("x", code="23505"), "Create").status_code == 409
    assert handle_supabase_error(Exception("violates foreign key constraint"), "Create").status_code == 400
    assert handle_supabase_error(Exception("relation does not exist"), "Read").status_code == 404
    assert handle_supabase_error(Exception("boom"), "Read", status_code=502).status_code == 502
