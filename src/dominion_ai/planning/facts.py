"""Fixed-point fact vectors used as GOAP search nodes."""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from dominion_ai.constants import FACT_SCALE


def to_fixed(value: float) -> int:
    """Convert a float to the fixed-point representation, truncating toward zero."""
    return int(value * FACT_SCALE)


class FactVector:
    """Immutable mapping of fact name to fixed-point value.

    Equality and hashing ignore insertion order so the same facts always land on the
    same search node.
    """

    __slots__ = ("_values", "_hash")

    def __init__(self, raw_values: Mapping[str, int] | None = None) -> None:
        self._values: dict[str, int] = dict(raw_values or {})
        self._hash = hash(tuple(sorted(self._values.items())))

    @classmethod
    def from_values(cls, values: Mapping[str, float]) -> FactVector:
        return cls({name: to_fixed(value) for name, value in values.items()})

    def get(self, name: str) -> float:
        return self._values.get(name, 0) / FACT_SCALE

    def raw(self, name: str) -> int:
        return self._values.get(name, 0)

    def with_value(self, name: str, value: float) -> FactVector:
        values = dict(self._values)
        values[name] = to_fixed(value)
        return FactVector(values)

    def with_delta(self, name: str, delta: float) -> FactVector:
        return self.with_value(name, self.get(name) + delta)

    def with_scaled(self, name: str, factor: float) -> FactVector:
        return self.with_value(name, self.get(name) * factor)

    def meets(self, name: str, minimum: float) -> bool:
        return self.raw(name) >= to_fixed(minimum)

    def satisfies(self, goal: FactVector) -> bool:
        """Every fact named by ``goal`` must be at least the goal value; missing facts count as zero."""
        return all(self.raw(name) >= value for name, value in goal._values.items())

    def items(self) -> Iterator[tuple[str, int]]:
        return iter(sorted(self._values.items()))

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FactVector):
            return NotImplemented
        return self._values == other._values

    def __hash__(self) -> int:
        return self._hash

    def __repr__(self) -> str:
        facts = ", ".join(f"{name}={value / FACT_SCALE:g}" for name, value in self.items())
        return f"FactVector({facts})"
