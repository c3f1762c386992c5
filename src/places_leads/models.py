from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


def _display_text(payload: dict) -> Optional[str]:
    name = payload.get("displayName")
    if isinstance(name, dict):
        return name.get("text") or None
    return name or None


@dataclass(frozen=True)
class RawPlace:
    """A Text Search result, restricted to the search field mask."""

    id: str
    display_name: Optional[str] = None
    formatted_address: Optional[str] = None
    rating: Optional[float] = None
    user_rating_count: Optional[int] = None

    @classmethod
    def from_api(cls, payload: dict) -> RawPlace:
        return cls(
            id=payload["id"],
            display_name=_display_text(payload),
            formatted_address=payload.get("formattedAddress") or None,
            rating=payload.get("rating"),
            user_rating_count=payload.get("userRatingCount"),
        )

    def to_api(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id}
        if self.display_name is not None:
            payload["displayName"] = {"text": self.display_name}
        if self.formatted_address is not None:
            payload["formattedAddress"] = self.formatted_address
        if self.rating is not None:
            payload["rating"] = self.rating
        if self.user_rating_count is not None:
            payload["userRatingCount"] = self.user_rating_count
        return payload


@dataclass(frozen=True)
class PlaceDetail:
    """A Place Details result. Superset of the search fields plus contacts."""

    id: str
    display_name: Optional[str] = None
    formatted_address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    rating: Optional[float] = None
    user_rating_count: Optional[int] = None

    @classmethod
    def from_api(cls, payload: dict) -> PlaceDetail:
        return cls(
            id=payload["id"],
            display_name=_display_text(payload),
            formatted_address=payload.get("formattedAddress") or None,
            phone=(payload.get("internationalPhoneNumber") or "").strip() or None,
            website=(payload.get("websiteUri") or "").strip() or None,
            rating=payload.get("rating"),
            user_rating_count=payload.get("userRatingCount"),
        )

    def to_api(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id}
        if self.display_name is not None:
            payload["displayName"] = {"text": self.display_name}
        if self.formatted_address is not None:
            payload["formattedAddress"] = self.formatted_address
        if self.phone is not None:
            payload["internationalPhoneNumber"] = self.phone
        if self.website is not None:
            payload["websiteUri"] = self.website
        if self.rating is not None:
            payload["rating"] = self.rating
        if self.user_rating_count is not None:
            payload["userRatingCount"] = self.user_rating_count
        return payload


@dataclass(frozen=True)
class NormalizedRecord:
    name: Optional[str]
    address: Optional[str]
    phone: Optional[str]
    website: Optional[str]
    rating: Optional[float]
    user_ratings_total: Optional[int]
    place_id: str
    score: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict) -> NormalizedRecord:
        return cls(
            name=payload.get("name"),
            address=payload.get("address"),
            phone=payload.get("phone"),
            website=payload.get("website"),
            rating=payload.get("rating"),
            user_ratings_total=payload.get("user_ratings_total"),
            place_id=payload["place_id"],
            score=payload.get("score"),
        )


@dataclass
class PageCacheEntry:
    """Accumulated search results for one (city, category) query.

    Place ids are unique within `places`.
    """

    places: list[RawPlace] = field(default_factory=list)
    next_page_token: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Optional[dict]) -> PageCacheEntry:
        payload = payload or {}
        return cls(
            places=[RawPlace.from_api(item) for item in payload.get("places") or [] if item.get("id")],
            next_page_token=payload.get("nextPageToken") or None,
        )

    def to_api(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"places": [place.to_api() for place in self.places]}
        if self.next_page_token:
            payload["nextPageToken"] = self.next_page_token
        return payload

    @property
    def place_ids(self) -> list[str]:
        return [place.id for place in self.places]
