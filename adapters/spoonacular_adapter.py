"""
Spoonacular HTTP client: ingredient unit conversion and recipe extraction.

Every failure (transport error, non-2xx status, unexpected body) is logged and
raised as UpstreamError so callers can roll back whatever they were doing.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlparse
import logging

import httpx
from pydantic import ValidationError

from app.exceptions import UpstreamError
from domain.schemas import RecipeCreate

logger = logging.getLogger("recipebox.spoonacular")


def extract_domain(url: str) -> Optional[str]:
    """``https://www.example.com/a/b`` -> ``example.com``"""
    host = urlparse(url or "").hostname
    if not host:
        return None
    return host[4:] if host.startswith("www.") else host


def _split_instructions(text: Optional[str]) -> List[str]:
    # The first block is the "Instructions" heading
    if not text:
        return []
    return [step.strip() for step in text.split("\n\n")[1:] if step.strip()]


def _measures(raw: Dict[str, Any]) -> List[Dict[str, Any]]:
    measures = []
    for system in ("us", "metric"):
        measure = (raw.get("measures") or {}).get(system) or {}
        amount = measure.get("amount")
        if not amount or amount <= 0:
            continue
        measures.append(
            {
                "amount": amount,
                "unit": measure.get("unitShort") or "",
                "unit_system": system,
            }
        )
    return measures


class SpoonacularClient:
    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {**params, "apiKey": self.api_key}
        try:
            resp = self._client.get(path, params=params)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "spoonacular_http_error path=%s status=%s", path, exc.response.status_code
            )
            raise UpstreamError(
                "Spoonacular request failed",
                details={"path": path, "status": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("spoonacular_transport_error path=%s error=%s", path, exc)
            raise UpstreamError(
                "Spoonacular is unreachable", details={"path": path}
            ) from exc
        except ValueError as exc:
            logger.error("spoonacular_bad_json path=%s", path)
            raise UpstreamError(
                "Spoonacular returned an unreadable response", details={"path": path}
            ) from exc

        if not isinstance(body, dict):
            raise UpstreamError(
                "Spoonacular returned an unexpected response", details={"path": path}
            )
        return body

    def convert(
        self, base_food: str, amount: float, source_unit: str, target_unit: str
    ) -> float:
        """Amount of ``base_food`` in ``target_unit`` equal to ``amount source_unit``"""
        body = self._get(
            "/convert",
            {
                "ingredientName": base_food,
                "sourceAmount": amount,
                "sourceUnit": source_unit,
                "targetUnit": target_unit,
            },
        )
        target = body.get("targetAmount")
        if not isinstance(target, (int, float)) or isinstance(target, bool) or target <= 0:
            logger.error(
                "spoonacular_conversion_missing food=%s source=%s%s target_unit=%s",
                base_food,
                amount,
                source_unit,
                target_unit,
            )
            raise UpstreamError(
                "Conversion result missing",
                details={"base_food": base_food, "target_unit": target_unit},
            )
        logger.info(
            "conversion food=%s source=%s%s target=%s%s",
            base_food,
            amount,
            source_unit,
            target,
            target_unit,
        )
        return float(target)

    def extract_recipe(self, url: str) -> RecipeCreate:
        """Scrape a recipe page into a creation payload"""
        data = self._get("/extract", {"url": url})

        source_url = data.get("sourceUrl") or url
        ingredients = [
            {
                "label": raw.get("originalName") or raw.get("name") or "",
                "base_food": raw.get("name"),
                "measures": _measures(raw),
            }
            for raw in data.get("extendedIngredients") or []
        ]

        payload = {
            "title": data.get("title"),
            "servings": data.get("servings") or 1,
            "url": source_url,
            "source_name": data.get("sourceName") or extract_domain(source_url),
            "image": data.get("image"),
            "instructions": _split_instructions(data.get("instructions")),
            "ingredients": [i for i in ingredients if i["label"]],
            "cuisines": data.get("cuisines") or [],
            "diets": data.get("diets") or [],
            "courses": data.get("dishTypes") or [],
            "occasions": data.get("occasions") or [],
        }
        try:
            return RecipeCreate.model_validate(payload)
        except ValidationError as exc:
            logger.error("spoonacular_extract_invalid url=%s errors=%s", url, exc.errors())
            raise UpstreamError(
                "Extracted recipe is incomplete", details={"url": url}
            ) from exc
