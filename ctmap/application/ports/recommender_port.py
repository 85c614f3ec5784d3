"""Port interface for the remote advocate recommendation service."""

from abc import ABC, abstractmethod
from typing import Any

from ctmap.domain.value_objects.recommendation import Recommendation


class RecommenderPort(ABC):
    @abstractmethod
    async def recommend(self, payload: dict[str, Any]) -> Recommendation:
        """Pick one advocate for the assignment described in *payload*.

        *payload* is `{"assignment": {...}, "advocates": [...], "workload": {...}}`.
        Raises ExternalCallError when the call fails or the reply cannot be
        parsed. Membership of the pick in the eligible set is checked by the
        caller, not here.
        """
        ...

    @property
    def is_available(self) -> bool:
        return True
