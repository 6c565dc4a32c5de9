# File: zodgen/uniques.py
"""
zodgen - Unique-Key Combinator
===============================
Enumerates every field set that identifies one row of an entity.

Candidates, in output order:

1. each individually ``@id`` / ``@unique`` field, as a singleton;
2. each declared multi-field unique group;
3. the primary-key group;
4. all singletons together, when there is more than one.

Two candidates are the same when their sorted distinct field names are
equal.  A candidate naming a field the entity lacks is dropped.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Set, Tuple

from zodgen.models import EntityInfo, FieldInfo

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.uniques")


def unique_fields(entity: EntityInfo) -> List[FieldInfo]:
    """Fields that are individually id or unique, in field order."""
    return [f for f in entity.fields if f.is_id or f.is_unique]


def _combination_key(names: Iterable[str]) -> Tuple[str, ...]:
    return tuple(sorted(set(names)))


def build_unique_combos(entity: EntityInfo) -> List[List[FieldInfo]]:
    """
    Ordered, de-duplicated unique combinations for *entity*.

    Each combination keeps the field order of its source (distinct names,
    first occurrence wins).  An empty result means the entity has nothing
    more specific than its general filter.
    """
    combos: List[List[FieldInfo]] = []
    seen: Set[Tuple[str, ...]] = set()

    def add(names: Iterable[str], source: str) -> None:
        distinct: List[str] = list(dict.fromkeys(names))
        if not distinct:
            return
        key: Tuple[str, ...] = _combination_key(distinct)
        if key in seen:
            return
        resolved: List[Optional[FieldInfo]] = [entity.get_field(n) for n in distinct]
        if any(f is None for f in resolved):
            missing: List[str] = [n for n, f in zip(distinct, resolved) if f is None]
            logger.debug(
                "Dropping %s combination %s on '%s': unknown field(s) %s.",
                source,
                distinct,
                entity.name,
                missing,
            )
            return
        seen.add(key)
        combos.append([f for f in resolved if f is not None])

    singles: List[FieldInfo] = unique_fields(entity)
    for f in singles:
        add([f.name], "singleton")

    for group in entity.unique_indexes:
        add(group.fields, "unique group")

    if entity.primary_key is not None:
        add(entity.primary_key.fields, "primary key")

    if len(singles) > 1:
        add([f.name for f in singles], "combined")

    logger.debug("Entity '%s': %d unique combination(s).", entity.name, len(combos))
    return combos


__all__: List[str] = ["unique_fields", "build_unique_combos"]

logger.debug("zodgen.uniques loaded.")
