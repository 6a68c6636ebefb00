"""Operation catalog: name to category, cacheability and TTL."""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..config.loader import apply_operation_overrides
from ..config.operations import DEFAULT_OPERATIONS
from ..errors import ConfigurationError, UnknownOperationError
from ..models.catalog import OperationSpec

logger = logging.getLogger(__name__)

SpecLike = Union[OperationSpec, Mapping[str, Any]]


class OperationCatalog:
    """Immutable lookup table of ``OperationSpec`` entries."""

    def __init__(self, operations: Optional[Iterable[SpecLike]] = None):
        """
        Build a catalog.

        Args:
            operations: Specs or raw mappings; defaults to the built-in
                operation set

        Raises:
            ConfigurationError: On duplicate names or invalid entries
        """
        if operations is None:
            operations = DEFAULT_OPERATIONS

        self._specs: Dict[str, OperationSpec] = {}
        for item in operations:
            spec = self._to_spec(item)
            if spec.name in self._specs:
                raise ConfigurationError(f"Duplicate operation in catalog: {spec.name}")
            self._specs[spec.name] = spec

    @staticmethod
    def _to_spec(item: SpecLike) -> OperationSpec:
        if isinstance(item, OperationSpec):
            return item
        try:
            return OperationSpec.model_validate(dict(item))
        except ValueError as e:
            raise ConfigurationError(f"Invalid operation entry {item!r}: {e}") from e

    def get(self, name: str) -> Optional[OperationSpec]:
        return self._specs.get(name)

    def require(self, name: str) -> OperationSpec:
        spec = self._specs.get(name)
        if spec is None:
            raise UnknownOperationError(name)
        return spec

    def names(self) -> List[str]:
        return sorted(self._specs)

    def categories(self) -> List[str]:
        return sorted({spec.category for spec in self._specs.values()})

    def describe(self) -> List[Dict[str, Any]]:
        """Catalog entries as plain dicts, sorted by name."""
        return [
            self._specs[name].model_dump(by_alias=True)
            for name in self.names()
        ]

    def validate(self, rate_limit_categories: Iterable[str]) -> None:
        """
        Check every entry against the declared rate-limit categories.

        Raises:
            ConfigurationError: Listing every offending operation
        """
        declared = set(rate_limit_categories)
        problems = []
        for spec in self._specs.values():
            if spec.category not in declared:
                problems.append(f"{spec.name}: undeclared category '{spec.category}'")
            if spec.ttl_seconds is not None and spec.ttl_seconds <= 0:
                problems.append(f"{spec.name}: TTL must be positive, got {spec.ttl_seconds}")

        if problems:
            raise ConfigurationError("Invalid operation catalog: " + "; ".join(problems))

    def with_overrides(self, overrides: Mapping[str, Mapping[str, Any]]) -> "OperationCatalog":
        return with_overrides(self, overrides)

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self):
        return iter(self._specs.values())


def with_overrides(
    catalog: OperationCatalog,
    overrides: Mapping[str, Mapping[str, Any]]
) -> OperationCatalog:
    """New catalog with per-operation category/cacheable/TTL overrides applied."""
    if not overrides:
        return catalog
    entries = {spec.name: spec.model_dump(by_alias=True) for spec in catalog}
    return OperationCatalog(apply_operation_overrides(entries, overrides).values())
