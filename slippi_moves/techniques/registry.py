"""Registry of technique definitions.

Registration order is the priority used when two definitions of the same
length claim the same frames.
"""

import dataclasses
from collections.abc import Sequence

from slippi_moves.techniques.base import TechniqueDefinition, gap_tolerances


class TechniqueRegistry:
    """Ordered collection of technique definitions."""

    def __init__(self) -> None:
        self._definitions: dict[str, TechniqueDefinition] = {}

    def register(self, definition: TechniqueDefinition) -> None:
        """Register a definition (replacing one with the same move id in place)."""
        self._definitions[definition.move_id] = definition

    def get(self, move_id: str) -> TechniqueDefinition | None:
        """Get a definition by move id."""
        return self._definitions.get(move_id)

    def disable(self, move_id: str) -> None:
        """Remove a definition; unknown ids are ignored."""
        self._definitions.pop(move_id, None)

    @property
    def technique_names(self) -> list[str]:
        """Registered move ids in priority order."""
        return list(self._definitions.keys())

    @property
    def definitions(self) -> list[TechniqueDefinition]:
        return list(self._definitions.values())

    def configure(self, move_id: str, max_gaps: int | Sequence[int]) -> None:
        """Override the gap tolerances of a registered technique."""
        definition = self._definitions.get(move_id)
        if definition is None:
            raise KeyError(f"Unknown technique: {move_id}")

        gaps = gap_tolerances(max_gaps, len(definition.steps))
        new_steps = (definition.steps[0],) + tuple(
            dataclasses.replace(step, max_gap=gap)
            for step, gap in zip(definition.steps[1:], gaps)
        )
        self._definitions[move_id] = dataclasses.replace(definition, steps=new_steps)

    def prioritize(self, order: Sequence[str]) -> None:
        """Move the named techniques to the front, in the given order."""
        unknown = [name for name in order if name not in self._definitions]
        if unknown:
            raise KeyError(f"Unknown techniques: {', '.join(unknown)}")

        reordered = {name: self._definitions[name] for name in order}
        for name, definition in self._definitions.items():
            reordered.setdefault(name, definition)
        self._definitions = reordered

    @classmethod
    def with_default_techniques(cls) -> "TechniqueRegistry":
        """Create registry with the default technique set."""
        from slippi_moves.techniques.definitions import DEFAULT_TECHNIQUES

        registry = cls()
        for definition in DEFAULT_TECHNIQUES:
            registry.register(definition)
        return registry
