"""Barcode lookups against OpenFoodFacts, feeding the ingredient catalog."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from uuid import uuid4

import httpx

from lifeos.adapters.openfoodfacts_client import OpenFoodFactsClient
from lifeos.domain.errors import InvalidInputError, NotFoundError
from lifeos.domain.nutrition import Ingredient
from lifeos.domain.products import ProductInfo
from lifeos.domain.units import round_hundredths
from lifeos.services.cache import Cache
from lifeos.services.catalog import PER_100, IngredientRepository
from lifeos.services.unit_of_work import ChangeSet, SaveIngredient, UnitOfWork

KJ_PER_KCAL = 4.184
MIN_BARCODE_LENGTH = 6
MAX_BARCODE_LENGTH = 14

_logger = logging.getLogger(__name__)


@dataclass
class ProductLookupService:
    """Resolves barcodes to catalog ingredients or third-party products."""

    client: OpenFoodFactsClient
    ingredient_repository: IngredientRepository
    unit_of_work: UnitOfWork
    cache: Cache
    ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def lookup(self, barcode: str) -> Ingredient | ProductInfo:
        """Return the local ingredient for a barcode, else the remote product."""
        code = _validate_barcode(barcode)
        local = self.ingredient_repository.find_by_barcode(code)
        if local is not None:
            return local
        product = await self.fetch_product(code)
        if product is None:
            raise NotFoundError("Product")
        return product

    async def import_product(self, barcode: str) -> Ingredient:
        """Add the product behind a barcode to the catalog as per-gram facts."""
        code = _validate_barcode(barcode)
        local = self.ingredient_repository.find_by_barcode(code)
        if local is not None:
            return local
        product = await self.fetch_product(code)
        if product is None:
            raise NotFoundError("Product")
        existing = self.ingredient_repository.find_by_name(product.name)
        facts = {
            "unit": "g",
            "calories": product.calories_100g / PER_100,
            "protein": product.protein_100g / PER_100,
            "carbs": product.carbs_100g / PER_100,
            "fat": product.fat_100g / PER_100,
            "source": "openfoodfacts",
            "barcode": code,
        }
        if existing is None:
            ingredient = Ingredient(id=uuid4(), name=product.name, **facts)
        else:
            ingredient = replace(existing, **facts)
        changes = ChangeSet()
        changes.add(SaveIngredient(ingredient))
        changes.commit(self.unit_of_work)
        _logger.info("Imported product %s as ingredient %s", code, ingredient.name)
        return ingredient

    async def fetch_product(self, barcode: str) -> ProductInfo | None:
        """Fetch and parse a product, caching hits; failures read as a miss."""
        cache_key = f"off:product:{barcode}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, ProductInfo):
            return cached
        try:
            payload = await self._call_with_retry(
                lambda: self.client.get_product(barcode)
            )
        except httpx.HTTPError:
            _logger.exception("OpenFoodFacts lookup failed for %s", barcode)
            return None
        if payload is None:
            return None
        product = parse_product(barcode, payload)
        self.cache.set(cache_key, product, ttl_seconds=self.ttl_seconds)
        return product

    async def _call_with_retry(
        self, func: Callable[[], Awaitable[dict[str, object] | None]]
    ) -> dict[str, object] | None:
        attempt = 0
        while True:
            try:
                return await func()
            except httpx.HTTPError as exc:
                attempt += 1
                _logger.warning(
                    "OpenFoodFacts request failed (attempt %s/%s): %s",
                    attempt,
                    self.retry_attempts + 1,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def parse_product(barcode: str, payload: dict[str, object]) -> ProductInfo:
    """Build product info from an OpenFoodFacts product payload."""
    nutriments = payload.get("nutriments") or {}
    calories = _number(nutriments.get("energy-kcal_100g"))
    if not calories:
        calories = round(_number(nutriments.get("energy_100g")) / KJ_PER_KCAL)
    protein = _number(nutriments.get("proteins_100g"))
    carbs = _number(nutriments.get("carbohydrates_100g"))
    fat = _number(nutriments.get("fat_100g"))
    name = str(payload.get("product_name") or "").strip() or barcode
    brands = str(payload.get("brands") or "")
    return ProductInfo(
        barcode=barcode,
        name=name,
        brand=brands.split(",")[0].strip() or None,
        image_url=payload.get("image_url") or None,
        calories_100g=max(0.0, float(calories)),
        protein_100g=round_hundredths(max(0.0, protein)),
        carbs_100g=round_hundredths(max(0.0, carbs)),
        fat_100g=round_hundredths(max(0.0, fat)),
    )


def _number(value: object) -> float:
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _validate_barcode(barcode: str) -> str:
    code = barcode.strip()
    if (
        not code.isdigit()
        or not MIN_BARCODE_LENGTH <= len(code) <= MAX_BARCODE_LENGTH
    ):
        raise InvalidInputError("Invalid barcode", {"barcode": "must be 6-14 digits"})
    return code
