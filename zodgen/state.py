# File: zodgen/state.py
"""
zodgen - Generation-pass state
===============================
One mutable record per generation pass: the entity-block line buffer,
the enums actually referenced (first-use order) and the entities already
emitted.  Created empty by the assembler, passed explicitly down the call
chain and discarded once the document is rendered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.state")


@dataclass(frozen=False, slots=True)
class GenerationState:
    """Accumulator shared by every component during one pass."""

    lines: List[str] = field(default_factory=list)
    enum_usage: Dict[str, List[str]] = field(default_factory=dict)
    emitted_entities: Set[str] = field(default_factory=set)

    def record_enum(self, name: str, values: Sequence[str]) -> None:
        """Remember an enum on first use; later uses keep the first entry."""
        if name not in self.enum_usage:
            self.enum_usage[name] = list(values)
            logger.debug("Enum '%s' recorded as used.", name)

    def mark_emitted(self, entity_name: str) -> None:
        self.emitted_entities.add(entity_name)

    def is_emitted(self, entity_name: str) -> bool:
        return entity_name in self.emitted_entities


__all__: List[str] = ["GenerationState"]

logger.debug("zodgen.state loaded.")
