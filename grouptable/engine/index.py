from __future__ import annotations
from typing import Any, Dict, Iterable, Iterator, KeysView, List, Mapping, Optional, Tuple
import copy

from ..errors import InvalidStateError, NotFoundError, UnorderableError
from .keys import Inconvertible, KeyShape, coerce_value


class GroupIndex:
    """Mapping of group key -> ordered, duplicate-free list of partition positions.

    Instances are not mutated after construction; compaction builds a new index.
    Every accessor hands out copies so callers never alias the internal lists.
    """

    def __init__(self, mapping: Optional[Mapping[Any, Iterable[int]]] = None) -> None:
        self._map: Dict[Any, List[int]] = {}
        self._samples: Optional[List[Any]] = None
        for key, positions in copy.deepcopy(dict(mapping or {})).items():
            ps = [_as_position(key, p) for p in positions]
            if len(set(ps)) != len(ps):
                raise InvalidStateError(f"duplicate partition positions for key {key!r}: {ps}")
            self._map[key] = ps

    @classmethod
    def _trusted(cls, mapping: Dict[Any, List[int]]) -> "GroupIndex":
        """Wrap a freshly built mapping without re-validating or copying it."""
        idx = cls.__new__(cls)
        idx._map = mapping
        idx._samples = None
        return idx

    # ---- basic accessors ----

    def keys(self) -> KeysView:
        return self._map.keys()

    def size(self) -> int:
        return len(self._map)

    __len__ = size

    def __contains__(self, key: Any) -> bool:
        try:
            return key in self._map
        except TypeError:  # unhashable probe key
            return False

    def lookup(self, key: Any) -> List[int]:
        """Exact lookup without coercion; raises NotFoundError."""
        try:
            return list(self._map[key])
        except (KeyError, TypeError):
            raise NotFoundError(key) from None

    __getitem__ = lookup

    def items(self) -> Iterator[Tuple[Any, List[int]]]:
        """Lazily yield (key, positions) in insertion order."""
        for key, positions in self._map.items():
            yield key, list(positions)

    iterate = items

    def __iter__(self) -> Iterator[Any]:
        return iter(self._map)

    def sorted_keys(self) -> List[Any]:
        try:
            return sorted(self._map)
        except TypeError as e:
            raise UnorderableError(f"group keys cannot be ordered: {e}") from e

    def to_dict(self) -> Dict[Any, List[int]]:
        return {k: list(v) for k, v in self._map.items()}

    def copy(self) -> "GroupIndex":
        return GroupIndex(self._map)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, GroupIndex):
            return self._map == other._map
        if isinstance(other, Mapping):
            return self._map == {k: list(v) for k, v in other.items()}
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"GroupIndex({self._map!r})"

    # ---- invariants ----

    def validate(self, n: int) -> None:
        """Raise InvalidStateError unless every position lies in [0, n)."""
        for key, positions in self._map.items():
            bad = [p for p in positions if p < 0 or p >= n]
            if bad:
                raise InvalidStateError(
                    f"key {key!r} references positions {bad} outside [0, {n})"
                )

    # ---- coercion ----

    def _type_samples(self) -> List[Any]:
        # One representative key per distinct key type, in first-seen order.
        if self._samples is None:
            seen: Dict[type, Any] = {}
            for key in self._map:
                seen.setdefault(type(key), key)
            self._samples = list(seen.values())
        return self._samples

    def coerce(self, key: Any, shape: Optional[KeyShape] = None) -> Any:
        """Return the canonical key equal to `key`, or raise NotFoundError.

        A key already present is returned as given. Otherwise conversion is tried
        against each distinct key type present in the index. An empty index has
        no canonical key type and always raises.
        """
        if key in self:
            return key
        if not self._map:
            raise NotFoundError(key, "index is empty")
        convert = shape.coerce if shape is not None else coerce_value
        reasons: List[str] = []
        for sample in self._type_samples():
            try:
                converted = convert(key, sample)
            except Inconvertible as e:
                reasons.append(str(e))
                continue
            if converted in self:
                return converted
        raise NotFoundError(key, "; ".join(reasons))


def _as_position(key: Any, p: Any) -> int:
    try:
        i = int(p)
    except (TypeError, ValueError) as e:
        raise InvalidStateError(f"key {key!r} has non-integer position {p!r}") from e
    if i != p:
        raise InvalidStateError(f"key {key!r} has non-integer position {p!r}")
    return i
