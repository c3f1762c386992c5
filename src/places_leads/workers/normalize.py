from __future__ import annotations

from typing import Optional, TypeVar

from ..models import NormalizedRecord, PlaceDetail, RawPlace

T = TypeVar("T")


def _first_present(*values: Optional[T]) -> Optional[T]:
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def normalize(raw: RawPlace, detail: Optional[PlaceDetail] = None) -> NormalizedRecord:
    """Combine a search hit with its details; each field prefers the detail value."""
    if detail is None:
        return NormalizedRecord(
            name=raw.display_name,
            address=raw.formatted_address,
            phone=None,
            website=None,
            rating=raw.rating,
            user_ratings_total=raw.user_rating_count,
            place_id=raw.id,
        )

    return NormalizedRecord(
        name=_first_present(detail.display_name, raw.display_name),
        address=_first_present(detail.formatted_address, raw.formatted_address),
        phone=detail.phone,
        website=detail.website,
        rating=_first_present(detail.rating, raw.rating),
        user_ratings_total=_first_present(detail.user_rating_count, raw.user_rating_count),
        place_id=raw.id,
    )
