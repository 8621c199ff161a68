# src/stackengine/registry.py
"""Read-only lookup tables for compound schemas and interaction rules."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Tuple, Union

from .codec import compound_from_dict, interaction_from_dict
from .errors import UnknownCompoundError
from .simulate import index_compounds
from .interactions import select_rules
from .types import CompoundSchema, InteractionRule

LOGGER = logging.getLogger(__name__)


class CompoundRegistry:
    """Compound schemas keyed by id. Built once, never mutated."""

    def __init__(self, compounds: Iterable[Union[CompoundSchema, Mapping[str, Any]]] = ()):
        schemas = [c if isinstance(c, CompoundSchema) else compound_from_dict(c) for c in compounds]
        self._compounds = MappingProxyType(index_compounds(schemas))
        LOGGER.debug("Loaded %d compound schema(s)", len(self._compounds))

    def get(self, compound_id: str) -> CompoundSchema:
        try:
            return self._compounds[compound_id]
        except KeyError:
            raise UnknownCompoundError(compound_id) from None

    def select(self, compound_ids: Iterable[str]) -> Tuple[CompoundSchema, ...]:
        """Schemas for `compound_ids` in the given order (duplicates collapsed)."""
        return tuple(self.get(cid) for cid in dict.fromkeys(compound_ids))

    def __contains__(self, compound_id: object) -> bool:
        return compound_id in self._compounds

    def __iter__(self) -> Iterator[CompoundSchema]:
        return iter(self._compounds.values())

    def __len__(self) -> int:
        return len(self._compounds)

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(self._compounds)


class InteractionRegistry:
    """Interaction rules in insertion order; that order is the application order."""

    def __init__(self, rules: Iterable[Union[InteractionRule, Mapping[str, Any]]] = ()):
        self._rules: Tuple[InteractionRule, ...] = tuple(
            r if isinstance(r, InteractionRule) else interaction_from_dict(r) for r in rules
        )
        LOGGER.debug("Loaded %d interaction rule(s)", len(self._rules))

    def rules_for(self, compound_ids: Iterable[str]) -> Tuple[InteractionRule, ...]:
        return select_rules(self._rules, compound_ids)

    def __iter__(self) -> Iterator[InteractionRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)
