"""Tests for the description enhancement endpoint."""

import pytest
from unittest.mock import patch
from api.generate_description import handler
from tests.utils.assertions import assert_json_response
from tests.utils.helpers import call_handler


@pytest.fixture(autouse=True)
def template_only(monkeypatch):
    monkeypatch.setenv("USE_LLM_DESCRIPTION", "false")


@pytest.mark.unit
def test_enhances_description():
    body = {
        "title": "Cafeteria Charmosa",
        "description": "Clientela fiel.",
        "price": "250.000",
        "annualRevenue": "480.000",
        "profitMargin": "25",
    }

    status, headers, data = call_handler(handler, "POST", "/api/generate_description", body=body)

    assert_json_response(headers, status, 200)
    assert set(data) == {"title", "description"}
    assert data["title"].startswith("Cafeteria Charmosa")
    assert "Clientela fiel." in data["description"]
    assert "R$ 120.000" in data["description"]


@pytest.mark.unit
def test_empty_body_still_enhances():
    status, _, data = call_handler(handler, "POST", "/api/generate_description")

    assert status == 200
    assert data["title"]


@pytest.mark.unit
def test_malformed_json():
    status, _, data = call_handler(handler, "POST", "/api/generate_description", body="{not json")

    assert status == 400
    assert data == {"message": "Invalid request body."}


@pytest.mark.unit
def test_wrong_body_shape():
    status, _, data = call_handler(handler, "POST", "/api/generate_description", body=["a", "b"])

    assert status == 400
    assert data == {"message": "Invalid request body."}


@pytest.mark.unit
def test_non_numeric_content_length():
    status, _, data = call_handler(
        handler, "POST", "/api/generate_description", headers={"Content-Length": "abc"}
    )

    assert status == 400
    assert data == {"message": "Invalid request body."}


@pytest.mark.unit
def test_enhancer_failure():
    with patch('api.generate_description.enhance_description', side_effect=RuntimeError("boom")):
        status, _, data = call_handler(
            handler, "POST", "/api/generate_description", body={"title": "X"}
        )

    assert status == 500
    assert data == {"message": "Error optimizing listing."}
