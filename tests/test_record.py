"""Tests for Record and the recursive merge."""

from __future__ import annotations

import copy
import os
import pickle
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from simlogger.exceptions import DuplicateKeyError
from simlogger.record import Record, merge, recursive_merge


class _Mask:
    """Elementwise comparison result that refuses truth testing, like an array."""

    def __init__(self, flags):
        self.flags = flags

    def __bool__(self):
        raise ValueError("truth value of a mask is ambiguous")

    def all(self):
        return all(self.flags)


class _Vector:
    def __init__(self, *values):
        self.values = values

    def __eq__(self, other):
        if len(self.values) != len(other.values):
            raise ValueError("operands could not be broadcast together")
        return _Mask([a == b for a, b in zip(self.values, other.values)])


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------

class TestRecord:
    def test_set_adds_key(self):
        rec = Record()
        rec.set("x", 1)
        assert rec["x"] == 1
        assert list(rec) == ["x"]

    def test_set_refuses_overwrite(self):
        rec = Record(x=1)
        with pytest.raises(DuplicateKeyError) as exc_info:
            rec.set("x", 2)
        assert exc_info.value.key == "x"
        assert rec["x"] == 1

    def test_keeps_insertion_order(self):
        rec = Record()
        for name in ["c", "a", "b"]:
            rec.set(name, 0)
        assert list(rec) == ["c", "a", "b"]

    def test_nested_dicts_become_records(self):
        rec = Record({"sub": {"y": 6}})
        assert isinstance(rec["sub"], Record)

    def test_deep_equality_with_dicts(self):
        assert Record({"sub": {"y": 6}}) == {"sub": {"y": 6}}
        assert {"sub": {"y": 6}} == Record({"sub": {"y": 6}})
        assert Record({"sub": {"y": 6}}) != {"sub": {"y": 7}}

    def test_empty_record_equals_empty_dict(self):
        assert Record() == {}

    def test_equality_ignores_key_order(self):
        assert Record({"a": 1, "b": 2}) == {"b": 2, "a": 1}

    def test_sequence_leaves(self):
        assert Record({"state": [1.0, 2.0]}) == {"state": [1.0, 2.0]}
        assert Record({"state": [1.0, 2.0]}) != {"state": [1.0, 3.0]}

    def test_elementwise_leaves(self):
        rec = Record({"sub": {"x": _Vector(1.0, 2.0)}})
        assert rec == {"sub": {"x": _Vector(1.0, 2.0)}}
        assert rec != {"sub": {"x": _Vector(1.0, 3.0)}}
        assert rec != {"sub": {"x": _Vector(1.0)}}

    def test_numpy_array_leaves(self):
        np = pytest.importorskip("numpy")
        rec = Record({"x": np.array([1.0, 2.0]), "sub": {"m": np.eye(2)}})
        assert rec == {"x": np.array([1.0, 2.0]), "sub": {"m": np.eye(2)}}
        assert {"x": np.array([1.0, 2.0]), "sub": {"m": np.eye(2)}} == rec
        assert rec != {"x": np.array([1.0, 5.0]), "sub": {"m": np.eye(2)}}
        assert rec != {"x": np.array([1.0, 2.0, 3.0]), "sub": {"m": np.eye(2)}}

    def test_not_equal_to_non_mappings(self):
        assert Record() != []
        assert Record(x=1) != 1

    def test_attribute_access(self):
        rec = Record({"ctrl": {"u": -1.0}})
        assert rec.ctrl.u == -1.0

    def test_missing_attribute_raises_attribute_error(self):
        with pytest.raises(AttributeError):
            Record().state

    def test_get_path(self):
        rec = Record({"a": {"b": {"c": 3}}})
        assert rec.get_path("a.b.c") == 3
        assert rec.get_path("a.b") == {"c": 3}

    def test_get_path_missing(self):
        rec = Record({"a": {"b": 1}})
        with pytest.raises(KeyError):
            rec.get_path("a.c")
        assert rec.get_path("a.b.c", None) is None

    def test_to_dict_returns_plain_dicts(self):
        plain = Record({"a": 1, "sub": {"b": 2}}).to_dict()
        assert type(plain) is dict
        assert type(plain["sub"]) is dict
        assert plain == {"a": 1, "sub": {"b": 2}}

    def test_pickle_and_deepcopy(self):
        rec = Record({"a": [1, 2], "sub": {"b": 2}})
        assert pickle.loads(pickle.dumps(rec)) == rec
        clone = copy.deepcopy(rec)
        assert clone == rec
        assert clone["a"] is not rec["a"]


# ---------------------------------------------------------------------------
# merge
# ---------------------------------------------------------------------------

class TestMerge:
    def test_multi_level_merge(self):
        parts = [
            {"d1": "A1"},
            {"d1b": {"d2a": "B1"}},
            {"d1b": {"d2b": "C1"}},
            {"d1b": {"d2c": {"d3a": "D1"}}},
            {"d1b": {"d2c": {"d3b": "E1"}}},
        ]
        assert recursive_merge(*parts) == {
            "d1": "A1",
            "d1b": {"d2a": "B1", "d2b": "C1", "d2c": {"d3a": "D1", "d3b": "E1"}},
        }

    def test_scalar_conflict_raises(self):
        with pytest.raises(DuplicateKeyError) as exc_info:
            merge({"x": 1}, {"x": 1})
        assert exc_info.value.key == "x"

    def test_nested_conflict_names_path(self):
        with pytest.raises(DuplicateKeyError) as exc_info:
            merge({"values": {"x": 1}}, {"values": {"x": 2}})
        assert exc_info.value.key == "x"
        assert exc_info.value.path == "values.x"

    def test_record_against_leaf_conflicts(self):
        with pytest.raises(DuplicateKeyError):
            merge({"sub": {"y": 1}}, {"sub": 3})

    def test_associative(self):
        a = Record({"s": {"x": 1}, "p": 0})
        b = Record({"s": {"y": 2}})
        c = Record({"s": {"z": {"w": 3}}, "q": 4})
        assert merge(merge(a, b), c) == merge(a, merge(b, c))

    def test_commutative_on_disjoint_keys(self):
        a = Record({"x": 1, "s": {"a": 1}})
        b = Record({"y": 2, "s": {"b": 2}})
        assert merge(a, b) == merge(b, a)

    def test_operands_untouched(self):
        a = Record({"s": {"x": 1}})
        b = Record({"s": {"y": 2}})
        merged = merge(a, b)
        assert a == {"s": {"x": 1}}
        assert b == {"s": {"y": 2}}
        assert merged["s"] is not a["s"]
        merged["s"].set("z", 3)
        assert "z" not in a["s"]

    def test_no_operands(self):
        assert merge() == {}

    def test_non_mapping_operand_rejected(self):
        with pytest.raises(TypeError):
            merge(Record(), 3)


# ---------------------------------------------------------------------------
# merge_in
# ---------------------------------------------------------------------------

class TestMergeIn:
    def test_flat_keeps_identity(self):
        rec = Record(a=1)
        before = id(rec)
        rec.merge_in({"b": 2})
        assert id(rec) == before
        assert rec == {"a": 1, "b": 2}

    def test_under_new_key(self):
        rec = Record()
        rec.merge_in({"y": 6}, "sub")
        assert rec == {"sub": {"y": 6}}

    def test_under_existing_key_accumulates(self):
        rec = Record()
        rec.merge_in({"y": 6}, "sub")
        rec.merge_in({"z": 7}, "sub")
        assert rec == {"sub": {"y": 6, "z": 7}}

    def test_under_leaf_key_conflicts(self):
        rec = Record(sub=1)
        with pytest.raises(DuplicateKeyError):
            rec.merge_in({"y": 6}, "sub")

    def test_conflict_leaves_record_unchanged(self):
        rec = Record({"a": 1, "sub": {"y": 1}})
        with pytest.raises(DuplicateKeyError) as exc_info:
            rec.merge_in({"b": 2, "y": 2}, "sub")
        assert exc_info.value.path == "sub.y"
        assert rec == {"a": 1, "sub": {"y": 1}}
        with pytest.raises(DuplicateKeyError):
            rec.merge_in({"c": 3, "a": 9})
        assert rec == {"a": 1, "sub": {"y": 1}}
