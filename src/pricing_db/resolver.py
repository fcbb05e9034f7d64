"""Identifier resolution against the catalog.

Provider price lists name canonical models (``gpt-4o``), while usage records
often carry dated or suffixed variants (``gpt-4o-2024-08-06``). Resolution
first tries an exact key, then the longest known key that is a prefix of the
query ending at a separator boundary. The boundary rule keeps ``gpt-4`` from
matching ``gpt-45-turbo``.
"""

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .catalog import Catalog, Namespace, PricingEntry
from .logging import LogEvent, log_debug

# Characters that may follow a known key in a versioned identifier.
PREFIX_SEPARATORS = frozenset("-./")


class MatchKind(str, Enum):
    """How an identifier was resolved."""

    EXACT = "exact"
    PREFIX = "prefix"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving an identifier in one namespace."""

    pricing: Optional[PricingEntry]
    match_kind: MatchKind
    key: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.match_kind is not MatchKind.UNKNOWN


UNRESOLVED = Resolution(pricing=None, match_kind=MatchKind.UNKNOWN)


def is_boundary_match(query: str, key: str) -> bool:
    """Return True if ``key`` is a prefix of ``query`` ending at a separator boundary."""
    if not query.startswith(key):
        return False
    if len(query) == len(key):
        return True
    return query[len(key)] in PREFIX_SEPARATORS


def resolve_shared(catalog: Catalog, namespace: Namespace, identifier: str) -> Resolution:
    """Resolve an identifier to the catalog's own pricing entry.

    Nothing is copied, so the result must never be handed to callers; the
    engine uses it on the calculation path. Use :func:`resolve` otherwise.

    Args:
        catalog: Catalog to search
        namespace: Namespace to search in
        identifier: Qualified (``provider/name``) or bare identifier, possibly versioned

    Returns:
        The resolution; ``match_kind`` is ``UNKNOWN`` when nothing matches
    """
    if not identifier:
        return UNRESOLVED

    pricing = catalog._entry(namespace, identifier)
    if pricing is not None:
        return Resolution(pricing=pricing, match_kind=MatchKind.EXACT, key=identifier)

    for key in catalog.candidates(namespace):
        if len(key) < len(identifier) and is_boundary_match(identifier, key):
            log_debug(
                LogEvent.PRICE_RESOLUTION,
                f"Resolved '{identifier}' by prefix to '{key}'",
                namespace=namespace.value,
                identifier=identifier,
                key=key,
            )
            return Resolution(pricing=catalog._entry(namespace, key), match_kind=MatchKind.PREFIX, key=key)

    return UNRESOLVED


def resolve(catalog: Catalog, namespace: Namespace, identifier: str) -> Resolution:
    """Resolve an identifier, returning a private copy of its pricing.

    Changing the returned pricing never affects the catalog.
    """
    resolution = resolve_shared(catalog, namespace, identifier)
    if resolution.pricing is None:
        return resolution
    return Resolution(pricing=copy.deepcopy(resolution.pricing), match_kind=resolution.match_kind, key=resolution.key)
