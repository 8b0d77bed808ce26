"""AI-assisted nutrition estimation for ingredients without known macros."""

import logging
from dataclasses import dataclass
from typing import Protocol

from lifeos.domain.products import NutritionEstimate

_logger = logging.getLogger(__name__)

ESTIMATE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "calories": {"type": "number", "minimum": 0},
        "protein": {"type": "number", "minimum": 0},
        "carbs": {"type": "number", "minimum": 0},
        "fat": {"type": "number", "minimum": 0},
        "unit": {"type": "string", "enum": ["g", "ml"]},
    },
    "required": ["calories", "protein", "carbs", "fat", "unit"],
    "additionalProperties": False,
}


class EstimationClient(Protocol):
    """Interface for LLM structured-output calls."""

    async def complete_json(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        """Return the model's JSON answer for ``prompt``."""


@dataclass
class NutritionEstimationService:
    """Asks an LLM for typical nutrition facts of a named ingredient."""

    client: EstimationClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def estimate(self, ingredient_name: str) -> NutritionEstimate | None:
        """Return macros per 100 g (or 100 ml), or None when estimation fails."""
        prompt = (
            f"Estimate the nutrition facts of the ingredient '{ingredient_name}'. "
            "Give calories, protein, carbs and fat per 100 g, or per 100 ml "
            "for liquids, and the matching unit."
        )
        try:
            raw = await self.client.complete_json(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=prompt,
                schema=ESTIMATE_SCHEMA,
            )
            return NutritionEstimate.model_validate(raw)
        except (RuntimeError, ValueError):
            _logger.exception("Nutrition estimation failed for %s", ingredient_name)
            return None
