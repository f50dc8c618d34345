"""Base class for store connectors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..feed import Engagement


class PostingStore(ABC):
    """Read-only view of the managed backend that owns postings and profiles.

    Connectors return raw records; validation happens in the engine.
    """

    name: str

    @abstractmethod
    def fetch_postings(self, city_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """Active postings, newest first, optionally limited to one city."""
        raise NotImplementedError

    @abstractmethod
    def fetch_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        """The profile record for `user_id`, or None when there is none."""
        raise NotImplementedError

    @abstractmethod
    def fetch_engagement(self, user_id: str) -> Engagement:
        """Posts the user liked, saved and applied to."""
        raise NotImplementedError

    @abstractmethod
    def fetch_city(self, city_id: int) -> Optional[Dict[str, Any]]:
        """Reference record for a city, or None."""
        raise NotImplementedError
