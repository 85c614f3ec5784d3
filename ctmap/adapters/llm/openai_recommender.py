"""OpenAI adapter — implements RecommenderPort with chat completions.

One call per `recommend`; retries and eligible-set validation belong to the
caller. Every failure is raised as ExternalCallError.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from ctmap.application.ports.recommender_port import RecommenderPort
from ctmap.config import settings
from ctmap.domain.errors import ExternalCallError
from ctmap.domain.value_objects.recommendation import Recommendation

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are an expert legal case allocation system for a bank's property due-diligence
team. Select the single BEST advocate for the assignment you are given.

Allocation criteria, in order of importance:
1. Location match (critical): the advocate must operate in the assignment's state,
   ideally in its district.
2. Product expertise: the advocate should list the assignment's product type.
3. Workload balance: prefer advocates with lower current workload (capacity is given).
4. Hub alignment: prefer advocates from the same hub when possible.
5. Tags and specialisation: e.g. "Fast TAT" for Urgent work, "High Value Expert"
   for High Value work, "Commercial Specialist" for Business Loans.

Choose ONLY from the advocates listed. Return a JSON object with exactly these fields:

{
  "advocateId": "id of the chosen advocate",
  "advocateName": "name of the chosen advocate",
  "confidence": integer 1-10,
  "factors": ["short factor", "..."],
  "reason": "one-sentence summary of why this advocate is the best choice"
}

Return ONLY valid JSON, no markdown or extra text."""

FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```", re.IGNORECASE)


def _strip_fences(text: str) -> str:
    return FENCE_RE.sub("", text).strip()


def parse_recommendation(raw_text: str) -> Recommendation:
    """Decode the model's reply. Raises ExternalCallError if it is unusable."""
    try:
        parsed = json.loads(_strip_fences(raw_text))
    except json.JSONDecodeError as e:
        raise ExternalCallError(f"Recommender returned invalid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise ExternalCallError("Recommender reply is not a JSON object")

    advocate_id = parsed.get("advocateId")
    if not advocate_id or not isinstance(advocate_id, str):
        raise ExternalCallError("Recommender reply has no advocateId")

    try:
        confidence = int(parsed.get("confidence") or 0)
    except (TypeError, ValueError):
        confidence = 0
    factors = parsed.get("factors") or []
    if not isinstance(factors, list):
        factors = [str(factors)]

    return Recommendation(
        advocate_id=advocate_id,
        advocate_name=str(parsed.get("advocateName") or ""),
        confidence=max(1, min(10, confidence)),
        reason=str(parsed.get("reason") or "AI allocation"),
        factors=tuple(str(f) for f in factors),
    )


class OpenAIRecommender(RecommenderPort):
    """OpenAI implementation of RecommenderPort."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
    ):
        self._api_key = (api_key if api_key is not None else settings.openai_api_key).strip()
        self._model = model or settings.openai_model
        # the caller owns retries and backoff
        self._client = (
            AsyncOpenAI(api_key=self._api_key, max_retries=0) if self._api_key else None
        )

    @property
    def is_available(self) -> bool:
        return self._client is not None

    async def recommend(self, payload: dict[str, Any]) -> Recommendation:
        if self._client is None:
            raise ExternalCallError("OPENAI_API_KEY is not set")

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": json.dumps(payload, ensure_ascii=False)},
                ],
                temperature=0.1,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.warning("OpenAI call failed: %s", e)
            raise ExternalCallError(f"Recommendation call failed: {e}") from e

        if not response.choices:
            raise ExternalCallError("Recommendation call returned no choices")
        raw_text = response.choices[0].message.content or ""
        return parse_recommendation(raw_text)
