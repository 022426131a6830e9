"""
Aggregate id listing and page tokens.

Aggregates are ordered by the timestamp of their lowest-version event. A page
token captures the filter of the call that produced it plus the last id
returned, so following it resumes exactly where the previous page stopped.

Token format: canonical JSON of the set fields, e.g.
    {"last_evaluated_key":"order-2","limit":2}
Callers must treat it as opaque.
"""

import json
from dataclasses import asdict, dataclass, replace
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from ..core.canonical import canonical_json_str
from ..core.clock import parse_timestamp
from ..core.errors import InvalidPageTokenError, ValidationError

_TOKEN_FIELDS = (
    "limit",
    "initial_event_after",
    "initial_event_before",
    "reverse",
    "last_evaluated_key",
)


@dataclass(frozen=True)
class AggregateIdsFilter:
    """
    Active filter of a list_aggregate_ids call.

    Bounds are inclusive ISO-8601 timestamps.
    """
    limit: Optional[int] = None
    initial_event_after: Optional[str] = None
    initial_event_before: Optional[str] = None
    reverse: bool = False
    last_evaluated_key: Optional[str] = None

    def __post_init__(self) -> None:
        if self.limit is not None and (
            isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1
        ):
            raise ValidationError(f"limit must be a positive integer, got {self.limit!r}")
        for bound in (self.initial_event_after, self.initial_event_before):
            if bound is None:
                continue
            try:
                parse_timestamp(bound)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"invalid timestamp bound: {bound!r}") from e


def encode_page_token(flt: AggregateIdsFilter) -> str:
    """Serialize a filter; unset fields and reverse=False are omitted."""
    data = {k: v for k, v in asdict(flt).items() if v is not None}
    if not data.get("reverse"):
        data.pop("reverse", None)
    return canonical_json_str(data)


def decode_page_token(token: str) -> AggregateIdsFilter:
    """
    Parse a page token produced by encode_page_token.

    Raises:
        InvalidPageTokenError: If token is not a valid page token
    """
    try:
        data = json.loads(token)
    except (TypeError, ValueError) as e:
        raise InvalidPageTokenError(f"page token is not valid JSON: {token!r}") from e

    if not isinstance(data, dict):
        raise InvalidPageTokenError("page token must encode an object")
    unknown = set(data) - set(_TOKEN_FIELDS)
    if unknown:
        raise InvalidPageTokenError(f"unknown page token fields: {sorted(unknown)}")
    if not isinstance(data.get("reverse", False), bool):
        raise InvalidPageTokenError("page token reverse must be a boolean")
    if not isinstance(data.get("last_evaluated_key", ""), str):
        raise InvalidPageTokenError("page token last_evaluated_key must be a string")

    try:
        return AggregateIdsFilter(**data)
    except ValidationError as e:
        raise InvalidPageTokenError(str(e)) from e


def resolve_filter(
    limit: Optional[int] = None,
    initial_event_after: Optional[str] = None,
    initial_event_before: Optional[str] = None,
    reverse: bool = False,
    page_token: Optional[str] = None,
) -> AggregateIdsFilter:
    """The token, when present, replaces the other arguments entirely."""
    if page_token is not None:
        return decode_page_token(page_token)
    return AggregateIdsFilter(
        limit=limit,
        initial_event_after=initial_event_after,
        initial_event_before=initial_event_before,
        reverse=bool(reverse),
    )


def paginate_aggregate_ids(
    initial_timestamps: List[Tuple[str, str]],
    flt: AggregateIdsFilter,
) -> Tuple[List[str], Optional[str]]:
    """
    Select one page of aggregate ids.

    Args:
        initial_timestamps: (aggregate_id, initial event timestamp) in
            insertion order; equal timestamps keep this order
        flt: Active filter

    Returns:
        (aggregate_ids, next_page_token) with next_page_token None on the last page
    """
    after = parse_timestamp(flt.initial_event_after) if flt.initial_event_after else None
    before = parse_timestamp(flt.initial_event_before) if flt.initial_event_before else None

    keyed: List[Tuple[datetime, str]] = []
    for aggregate_id, ts in initial_timestamps:
        initial = parse_timestamp(ts)
        if after is not None and initial < after:
            continue
        if before is not None and initial > before:
            continue
        keyed.append((initial, aggregate_id))

    # sorted() is stable, also with reverse=True
    keyed.sort(key=lambda item: item[0], reverse=flt.reverse)
    ids = [aggregate_id for _, aggregate_id in keyed]

    start = 0
    if flt.last_evaluated_key is not None:
        positions: Dict[str, int] = {aggregate_id: i for i, aggregate_id in enumerate(ids)}
        # an unknown key (e.g. aggregate rolled back since) restarts the listing
        start = positions.get(flt.last_evaluated_key, -1) + 1

    remaining = ids[start:]
    if flt.limit is None or len(remaining) <= flt.limit:
        return remaining, None

    page = remaining[: flt.limit]
    next_token = encode_page_token(replace(flt, last_evaluated_key=page[-1]))
    return page, next_token
