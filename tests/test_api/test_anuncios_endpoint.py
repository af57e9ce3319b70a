"""Tests for the listing search endpoint."""

import pytest
from unittest.mock import patch
from urllib.parse import quote
from api.anuncios import handler
from tests.utils.assertions import assert_json_response, assert_valid_listing
from tests.utils.helpers import call_handler


@pytest.mark.unit
def test_filtered_search(seeded_supabase):
    status, headers, data = call_handler(
        handler, "GET", "/api/anuncios?setores=Tecnologia&valor_max=2000000&localidades=barueri"
    )

    assert_json_response(headers, status, 200)
    assert [listing["id"] for listing in data] == ["4"]
    assert data[0]["title"] == "Startup de SaaS B2B Inovadora"
    assert_valid_listing(data[0])


@pytest.mark.unit
def test_no_filters_returns_everything(seeded_supabase):
    status, _, data = call_handler(handler, "GET", "/api/anuncios")

    assert status == 200
    assert len(data) == 7


@pytest.mark.unit
def test_multiple_sectors_and_encoded_location(seeded_supabase):
    path = f"/api/anuncios?setores=Varejo,Educa%C3%A7%C3%A3o&localidades={quote('São Paulo')},cotia,itapevi"
    status, _, data = call_handler(handler, "GET", path)

    assert status == 200
    assert {listing["id"] for listing in data} == {"6", "8"}


@pytest.mark.unit
def test_no_matches_is_empty_list(seeded_supabase):
    status, _, data = call_handler(handler, "GET", "/api/anuncios?valor_max=1000")

    assert status == 200
    assert data == []


@pytest.mark.unit
@pytest.mark.parametrize("valor_max", ["abc", "-10"])
def test_invalid_max_price(seeded_supabase, valor_max):
    status, _, data = call_handler(handler, "GET", f"/api/anuncios?valor_max={valor_max}")

    assert status == 400
    assert data == {"message": "Invalid search filters."}


@pytest.mark.unit
def test_unexpected_error_returns_json(seeded_supabase):
    with patch('api.anuncios.search_listings', side_effect=RuntimeError("boom")):
        status, headers, data = call_handler(handler, "GET", "/api/anuncios")

    assert_json_response(headers, status, 500)
    assert data == {"message": "Error fetching listings."}


@pytest.mark.unit
def test_store_failure(seeded_supabase):
    seeded_supabase.failing_tables.add("listings")

    status, _, data = call_handler(handler, "GET", "/api/anuncios")

    assert status == 500
    assert data == {"message": "Error fetching listings."}
