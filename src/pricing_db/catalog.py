"""Immutable catalog of provider pricing records.

The catalog is built once from a batch of raw provider records. Every record is
validated before anything is indexed, so construction either produces a
complete catalog or raises :class:`ConfigurationError` with nothing visible.

Each namespace (models, image models, grounding prefixes) gets:

- an exact-match index holding the qualified key ``provider/identifier`` for
  every entry, plus the bare ``identifier`` for the first provider (in
  ascending provider order) that defines it;
- a tuple of prefix-match candidate keys ordered longest first.

A bare identifier defined by two or more providers is *ambiguous*: it keeps
resolving to the first provider, and every provider stays reachable through
its qualified key.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple, Union

from .errors import ConfigurationError, DuplicateProviderError
from .logging import LogEvent, log_debug, log_info
from .pricing import CreditPricing, GroundingPricing, ImagePricing, ModelPricing, ProviderPricing
from .validation import DEFAULT_LIMITS, ValidationLimits, validate_provider_record

PricingEntry = Union[ModelPricing, ImagePricing, GroundingPricing]


class Namespace(str, Enum):
    """Identifier namespaces in the catalog."""

    MODELS = "models"
    IMAGE_MODELS = "image_models"
    GROUNDING = "grounding"


@dataclass(frozen=True)
class ProviderRecord:
    """One raw provider record together with the name of its source.

    ``provider`` overrides the identifier inferred from ``filename`` when the
    record itself does not declare one.
    """

    raw: Any
    filename: str
    provider: Optional[str] = None


@dataclass(frozen=True)
class _NamespaceIndex:
    entries: Mapping[str, PricingEntry]
    candidates: Tuple[str, ...]
    owners: Mapping[str, str]
    ambiguous: FrozenSet[str]


@dataclass
class _NamespaceBuilder:
    entries: Dict[str, PricingEntry] = field(default_factory=dict)
    owners: Dict[str, str] = field(default_factory=dict)
    ambiguous: Set[str] = field(default_factory=set)

    def add(self, provider: str, identifier: str, pricing: PricingEntry) -> None:
        qualified = f"{provider}/{identifier}"
        if qualified in self.owners:
            # Qualified keys are always present, even over an earlier slash-containing bare key.
            del self.owners[qualified]
            self.ambiguous.add(qualified)
        self.entries[qualified] = pricing
        if identifier in self.owners or identifier in self.entries:
            # First writer keeps the bare key.
            self.ambiguous.add(identifier)
            return
        self.entries[identifier] = pricing
        self.owners[identifier] = provider

    def freeze(self) -> _NamespaceIndex:
        return _NamespaceIndex(
            entries=MappingProxyType(dict(self.entries)),
            candidates=sorted_keys_by_length_desc(self.entries),
            owners=MappingProxyType(dict(self.owners)),
            ambiguous=frozenset(self.ambiguous),
        )


def sorted_keys_by_length_desc(keys: Iterable[str]) -> Tuple[str, ...]:
    """Order keys longest first, ties broken alphabetically."""
    return tuple(sorted(keys, key=lambda k: (-len(k), k)))


class Catalog:
    """Read-only, queryable union of all provider pricing records.

    Public accessors return independent deep copies of composite values, so a
    caller mutating what it received cannot affect any other reader.
    """

    def __init__(
        self,
        providers: Mapping[str, ProviderPricing],
        indexes: Mapping[Namespace, _NamespaceIndex],
    ) -> None:
        self._providers = MappingProxyType(dict(providers))
        self._indexes = MappingProxyType(dict(indexes))
        self._credits: Mapping[str, CreditPricing] = MappingProxyType(
            {name: p.credit_pricing for name, p in providers.items() if p.credit_pricing is not None}
        )

    def __repr__(self) -> str:
        return (
            f"Catalog(providers={len(self._providers)}, models={self.count(Namespace.MODELS)}, "
            f"image_models={self.count(Namespace.IMAGE_MODELS)}, grounding={self.count(Namespace.GROUNDING)})"
        )

    # Internal, non-copying access for the resolver and the cost engine.

    def _entry(self, namespace: Namespace, key: str) -> Optional[PricingEntry]:
        return self._indexes[namespace].entries.get(key)

    def _credit(self, provider: str) -> Optional[CreditPricing]:
        return self._credits.get(provider)

    # Public accessors.

    def lookup(self, namespace: Namespace, key: str) -> Optional[PricingEntry]:
        """Exact-match lookup of a qualified or unambiguous bare key."""
        return copy.deepcopy(self._entry(namespace, key))

    def candidates(self, namespace: Namespace) -> Tuple[str, ...]:
        """Prefix-match candidate keys, longest first."""
        return self._indexes[namespace].candidates

    def keys(self, namespace: Namespace) -> List[str]:
        """All exact-match keys of a namespace, sorted."""
        return sorted(self._indexes[namespace].entries)

    def ambiguous(self, namespace: Namespace = Namespace.MODELS) -> FrozenSet[str]:
        """Bare identifiers defined by more than one provider."""
        return self._indexes[namespace].ambiguous

    def owner(self, namespace: Namespace, identifier: str) -> Optional[str]:
        """Provider whose entry a bare identifier resolves to."""
        return self._indexes[namespace].owners.get(identifier)

    def count(self, namespace: Namespace) -> int:
        """Number of exact-match keys (qualified and bare) in a namespace."""
        return len(self._indexes[namespace].entries)

    def providers(self) -> List[str]:
        """Provider identifiers in ascending order."""
        return sorted(self._providers)

    def provider(self, name: str) -> Optional[ProviderPricing]:
        """Deep copy of a provider's full pricing record."""
        return copy.deepcopy(self._providers.get(name))

    def credit_pricing(self, provider: str) -> Optional[CreditPricing]:
        """Deep copy of a provider's credit pricing, if any."""
        return copy.deepcopy(self._credit(provider))


def build_catalog(
    records: Iterable[ProviderRecord],
    limits: ValidationLimits = DEFAULT_LIMITS,
) -> Catalog:
    """Validate provider records and merge them into one immutable catalog.

    Records are processed in ascending provider order regardless of the order
    they are supplied in, so repeated builds from the same inputs always bind
    ambiguous bare identifiers to the same provider.

    Args:
        records: Raw provider records
        limits: Sanity ceilings passed to the validator

    Returns:
        The finished catalog

    Raises:
        ConfigurationError: If there are no records, a provider is declared twice,
            or any record fails validation
    """
    validated: Dict[str, ProviderPricing] = {}
    sources: Dict[str, str] = {}

    for record in records:
        pricing = validate_provider_record(record.raw, record.filename, provider=record.provider, limits=limits)
        if pricing.provider in validated:
            raise DuplicateProviderError(
                f"Provider '{pricing.provider}' is defined in both {sources[pricing.provider]} and {record.filename}",
                provider=pricing.provider,
                paths=[sources[pricing.provider], record.filename],
            )
        validated[pricing.provider] = pricing
        sources[pricing.provider] = record.filename
        log_debug(
            LogEvent.CATALOG_VALIDATION,
            f"Validated pricing for provider '{pricing.provider}'",
            provider=pricing.provider,
            path=record.filename,
            models=len(pricing.models),
        )

    if not validated:
        raise ConfigurationError("No provider pricing records to build a catalog from")

    builders = {namespace: _NamespaceBuilder() for namespace in Namespace}
    for provider in sorted(validated):
        pricing = validated[provider]
        for name in sorted(pricing.models):
            builders[Namespace.MODELS].add(provider, name, pricing.models[name])
        for name in sorted(pricing.image_models):
            builders[Namespace.IMAGE_MODELS].add(provider, name, pricing.image_models[name])
        for prefix in sorted(pricing.grounding):
            builders[Namespace.GROUNDING].add(provider, prefix, pricing.grounding[prefix])

    indexes = {namespace: builder.freeze() for namespace, builder in builders.items()}
    catalog = Catalog(validated, indexes)

    for namespace, index in indexes.items():
        if index.ambiguous:
            log_debug(
                LogEvent.CATALOG_BUILD,
                f"Ambiguous bare {namespace.value} identifiers resolve to the first provider",
                namespace=namespace.value,
                identifiers=sorted(index.ambiguous),
                owners={name: index.owners[name] for name in sorted(index.ambiguous) if name in index.owners},
            )
    log_info(
        LogEvent.CATALOG_BUILD,
        f"Built pricing catalog: {catalog!r}",
        providers=catalog.providers(),
    )
    return catalog
