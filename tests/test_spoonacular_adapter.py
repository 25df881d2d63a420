"""
Tests for the Spoonacular HTTP client using httpx.MockTransport.
"""

import httpx
import pytest

from app.exceptions import UpstreamError
from adapters import SpoonacularClient, extract_domain


def _client(handler) -> SpoonacularClient:
    return SpoonacularClient(
        "https://api.spoonacular.test/recipes",
        api_key="secret",
        transport=httpx.MockTransport(handler),
    )


# =============================================================================
# CONVERT
# =============================================================================


def test_convert_sends_expected_query():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"targetAmount": 907.185, "targetUnit": "g"})

    result = _client(handler).convert("chicken", 2, "lb", "g")

    assert result == pytest.approx(907.185)
    assert seen["path"] == "/recipes/convert"
    assert seen["params"] == {
        "ingredientName": "chicken",
        "sourceAmount": "2",
        "sourceUnit": "lb",
        "targetUnit": "g",
        "apiKey": "secret",
    }


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(402, json={"message": "daily quota used"}),
        httpx.Response(500, text="boom"),
        httpx.Response(200, json={"answer": "no idea"}),
        httpx.Response(200, json={"targetAmount": 0}),
        httpx.Response(200, json={"targetAmount": "lots"}),
        httpx.Response(200, json=[1, 2, 3]),
        httpx.Response(200, text="<html>not json</html>"),
    ],
)
def test_convert_failures_raise_upstream_error(response):
    client = _client(lambda request: response)
    with pytest.raises(UpstreamError) as exc_info:
        client.convert("honey", 170, "g", "cup")
    assert exc_info.value.http_status == 502


def test_convert_transport_error_raises_upstream_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError):
        _client(handler).convert("honey", 170, "g", "cup")


# =============================================================================
# EXTRACT
# =============================================================================


EXTRACTED = {
    "title": "Slow Cooker Honey Garlic Chicken",
    "servings": 4,
    "sourceUrl": "https://www.wellplated.com/slow-cooker-honey-garlic-chicken/",
    "sourceName": None,
    "image": "https://img.test/chicken.jpg",
    "instructions": "Instructions\n\nPlace the chicken in the slow cooker.\n\n  Cook on LOW.  \n\n",
    "extendedIngredients": [
        {
            "name": "chicken thighs",
            "originalName": "boneless skinless chicken thighs",
            "measures": {
                "us": {"amount": 2, "unitShort": "lb"},
                "metric": {"amount": 907.185, "unitShort": "g"},
            },
        },
        {
            "name": "eggs",
            "originalName": "eggs",
            "measures": {
                "us": {"amount": 2, "unitShort": ""},
                "metric": {"amount": 0, "unitShort": ""},
            },
        },
    ],
    "cuisines": ["Asian"],
    "diets": ["gluten free"],
    "dishTypes": ["main course", "dinner"],
}


def test_extract_recipe_maps_payload():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url.params["url"]
        return httpx.Response(200, json=EXTRACTED)

    recipe = _client(handler).extract_recipe("https://wellplated.com/x")

    assert seen["url"] == "https://wellplated.com/x"
    assert recipe.title == "Slow Cooker Honey Garlic Chicken"
    assert recipe.source_name == "wellplated.com"
    assert recipe.instructions == ["Place the chicken in the slow cooker.", "Cook on LOW."]
    assert recipe.courses == ["main course", "dinner"]
    assert recipe.cuisines == ["Asian"]

    chicken, eggs = recipe.ingredients
    assert chicken.label == "boneless skinless chicken thighs"
    assert chicken.base_food == "chicken thighs"
    assert chicken.measure("metric").unit == "g"
    # A zero amount is dropped rather than stored
    assert [m.unit_system for m in eggs.measures] == ["us"]


def test_extract_recipe_without_title_raises_upstream_error():
    payload = dict(EXTRACTED, title=None)
    client = _client(lambda request: httpx.Response(200, json=payload))

    with pytest.raises(UpstreamError):
        client.extract_recipe("https://wellplated.com/x")


# =============================================================================
# DOMAIN
# =============================================================================


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.wellplated.com/slow-cooker/", "wellplated.com"),
        ("http://allrecipes.com", "allrecipes.com"),
        ("https://cooking.nytimes.com/recipes/1", "cooking.nytimes.com"),
        ("not a url", None),
        ("", None),
    ],
)
def test_extract_domain(url, expected):
    assert extract_domain(url) == expected
