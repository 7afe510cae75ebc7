"""Filter builder - turns an event definition plus user params into a query."""

from __future__ import annotations

import logging
from datetime import datetime

from wax_trigger.errors import MissingRequiredParameter
from wax_trigger.models.query import (
    BlockInfoRequest,
    EventDefinition,
    FilterParams,
    HistoryQuery,
)

log = logging.getLogger(__name__)

DEFAULT_LIMIT = 100


def _join(names: frozenset[str]) -> str:
    # Hyperion treats a comma-separated list as OR
    return ",".join(sorted(names))


def build_query(
    definition: EventDefinition,
    params: FilterParams,
    after: datetime,
    before: datetime,
    limit: int = DEFAULT_LIMIT,
) -> HistoryQuery:
    """Build the get_actions query for ``definition`` over ``[after, before]``.

    Raises MissingRequiredParameter when a required role-bound value is
    empty, so the caller never sends an unscoped, chain-wide query. Empty
    optional filters are left out of the query entirely.
    """
    if definition.is_block_event:
        raise ValueError(
            f"{definition.event_key} is served by chain info, not action history"
        )

    filters: dict[str, str] = {}
    if definition.contract_accounts:
        filters["act.account"] = _join(definition.contract_accounts)
    if definition.action_names:
        filters["act.name"] = _join(definition.action_names)

    for role, binding in definition.role_bindings.items():
        value = params.get(binding.param)
        if not value:
            if binding.required:
                raise MissingRequiredParameter(binding.param, definition.event_key)
            continue
        log.debug("Binding %s=%s onto %s", role, value, binding.field)
        filters[binding.field] = value

    for param, field in definition.optional_filters.items():
        value = params.get(param)
        if value:
            filters[field] = value

    return HistoryQuery(
        after=after,
        before=before,
        limit=limit,
        sort="asc",
        extra_filters=filters,
    )


def build_request(definition: EventDefinition) -> BlockInfoRequest:
    """Chain-info request for a block event definition."""
    if definition.block_source is None:
        raise ValueError(f"{definition.event_key} is not a block event")
    return BlockInfoRequest(source=definition.block_source)
