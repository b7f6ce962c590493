"""Hierarchical record container and conflict-checked recursive merge."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from .exceptions import DuplicateKeyError


class Record(Mapping):
    """
    Ordered mapping from name to value or nested Record.

    A key is written at most once per accumulation pass: `set` refuses to
    overwrite, and nested Records are combined with `merge` instead.

    Plain dicts passed to the constructor (including nested ones) are turned
    into Records, so expected results can be written as dict literals:

        Record({"sub": {"y": 6}}) == {"sub": {"y": 6}}
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._data: dict[str, Any] = {}
        items = list(data.items()) if data is not None else []
        items.extend(kwargs.items())
        for key, value in items:
            if isinstance(value, Mapping) and not isinstance(value, Record):
                value = Record(value)
            self.set(key, value)

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__!s} has no key {name!r}"
            ) from None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return _mapping_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self._data.items())
        return f"Record({inner})"

    def __reduce__(self) -> tuple:
        return (type(self), (self._data,))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        """Add a new key. Raises DuplicateKeyError if the key already exists."""
        if key in self._data:
            raise DuplicateKeyError(key)
        self._data[key] = value

    def merge_in(self, other: Mapping[str, Any], key: str | None = None) -> None:
        """
        Merge `other` into this Record in place, flat or under `key`.

        Under a key, the entry is created if absent and recursively merged if
        it already holds a Record. The merged result is computed before any
        write, so a conflict leaves this Record unchanged.
        """
        if key is None:
            merged = merge(self, other)
            self._data = merged._data
            return
        if key not in self._data:
            self._data[key] = _copy_tree(_as_record(other))
            return
        existing = self._data[key]
        if not isinstance(existing, Record):
            raise DuplicateKeyError(key)
        try:
            self._data[key] = merge(existing, other)
        except DuplicateKeyError as exc:
            raise DuplicateKeyError(exc.key, f"{key}.{exc.path}") from None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_path(self, path: str, default: Any = ...) -> Any:
        """Read a dotted path such as ``"sub.y"``."""
        node: Any = self
        for part in path.split("."):
            if not isinstance(node, Record) or part not in node:
                if default is ...:
                    raise KeyError(path)
                return default
            node = node[part]
        return node

    def to_dict(self) -> dict[str, Any]:
        """Return the record tree as nested plain dicts."""
        return {
            k: v.to_dict() if isinstance(v, Record) else v
            for k, v in self._data.items()
        }


# ---------------------------------------------------------------------------
# Equality
# ---------------------------------------------------------------------------

def _mapping_equal(a: Mapping, b: Mapping) -> bool:
    if len(a) != len(b):
        return False
    for k, v in a.items():
        if k not in b or not _leaf_equal(v, b[k]):
            return False
    return True


def _leaf_equal(a: Any, b: Any) -> bool:
    """
    Compare two values, walking nested mappings.

    Array leaves compare elementwise, so `a == b` gives an array rather than a
    bool; it is reduced with its own `all()`. Shapes that cannot be compared
    elementwise are unequal.
    """
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return _mapping_equal(a, b)
    if getattr(a, "shape", None) is not None and getattr(b, "shape", None) is not None:
        if a.shape != b.shape:
            return False
    try:
        result = a == b
    except ValueError:
        # operands could not be broadcast together
        return False
    if isinstance(result, bool):
        return result
    reduce_all = getattr(result, "all", None)
    if callable(reduce_all):
        return bool(reduce_all())
    return bool(result)


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------

def _as_record(value: Any) -> Record:
    if isinstance(value, Record):
        return value
    if isinstance(value, Mapping):
        return Record(value)
    raise TypeError(f"Cannot merge {type(value).__name__!s}; expected a Record or mapping")


def _copy_tree(record: Record) -> Record:
    """Rebuild every Record node; leaves are shared by reference."""
    out = Record()
    for k, v in record.items():
        out._data[k] = _copy_tree(v) if isinstance(v, Record) else v
    return out


def _merge_two(a: Record, b: Record, prefix: str) -> Record:
    out = _copy_tree(a)
    for k, v in b.items():
        if k not in out._data:
            out._data[k] = _copy_tree(v) if isinstance(v, Record) else v
            continue
        existing = out._data[k]
        if isinstance(existing, Record) and isinstance(v, Record):
            out._data[k] = _merge_two(existing, v, f"{prefix}{k}.")
        else:
            raise DuplicateKeyError(k, f"{prefix}{k}")
    return out


def merge(*records: Mapping[str, Any]) -> Record:
    """
    Combine records key by key, recursing into nested Records.

    A key held by both sides is a conflict unless both values are Records.
    Operands are never modified; the result is a new record tree.

        >>> merge({"d1": "A1"}, {"d1b": {"d2a": "B1"}}, {"d1b": {"d2b": "C1"}})
        Record(d1='A1', d1b=Record(d2a='B1', d2b='C1'))
    """
    result = Record()
    for rec in records:
        result = _merge_two(result, _as_record(rec), "")
    return result


recursive_merge = merge
