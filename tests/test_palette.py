"""Tests for the function palette."""

import random

import numpy as np
import pytest

from funcsynth import BUILTIN_OPERATIONS, ConfigurationError, FunctionPalette, PrimitiveType


class TestBuiltins:
    def test_catalog_covers_float_and_integer_types(self):
        assert "f32.add" in BUILTIN_OPERATIONS
        assert "f64.sqrt" in BUILTIN_OPERATIONS
        assert "i64.mul" in BUILTIN_OPERATIONS
        assert "i32.sqrt" not in BUILTIN_OPERATIONS

    def test_entry_metadata(self):
        entry = BUILTIN_OPERATIONS["f32.neg"]
        assert entry.arity == 1
        assert entry.operand_type == PrimitiveType.F32
        assert entry.result_type == PrimitiveType.F32
        assert entry.function(np.float32(2.0)) == -2.0


class TestRegistration:
    def test_from_names_collapses_duplicates(self):
        palette = FunctionPalette.from_names(["f32.add", "f32.mul", "F32.ADD"])
        assert palette.names == ["f32.add", "f32.mul"]
        assert len(palette) == 2

    def test_duplicate_register(self):
        palette = FunctionPalette.from_names(["f32.add"])
        with pytest.raises(ConfigurationError, match="already registered"):
            palette.register("f32.add")

    def test_unknown_builtin(self):
        with pytest.raises(ConfigurationError, match="Unknown builtin"):
            FunctionPalette().register("f32.tan")

    def test_builtin_arity_must_agree(self):
        with pytest.raises(ConfigurationError, match="arity"):
            FunctionPalette().register("f32.add", arity=1)

    def test_builtin_types_must_agree(self):
        with pytest.raises(ConfigurationError):
            FunctionPalette().register("f32.add", operand_type="f64")

    def test_custom_operation(self):
        palette = FunctionPalette()
        entry = palette.register("twice", 1, "f64", "f64", lambda a: a * 2, doc="Doubles.")
        assert palette.get("twice") is entry
        assert entry.doc == "Doubles."
        assert "twice" in palette

    def test_custom_operation_needs_types(self):
        with pytest.raises(ConfigurationError, match="needs arity"):
            FunctionPalette().register("twice", arity=1, function=lambda a: a * 2)

    def test_custom_operation_arity_checked_against_callable(self):
        with pytest.raises(ConfigurationError, match="fewer positional"):
            FunctionPalette().register("bad", 2, "f32", "f32", lambda a: a)

    def test_custom_operation_needs_operands(self):
        with pytest.raises(ConfigurationError, match="at least one"):
            FunctionPalette().register("const", 0, "f32", "f32", lambda: 1.0)


class TestSampling:
    def test_filters(self):
        palette = FunctionPalette.from_names(["f32.add", "f32.neg", "f64.mul"])
        rng = random.Random(3)
        for _ in range(20):
            assert palette.sample_random_entry(rng, arity=1).name == "f32.neg"
            assert palette.sample_random_entry(rng, operand_type="f64").name == "f64.mul"

    def test_operand_types_filter(self):
        palette = FunctionPalette.from_names(["f32.add", "i32.add"])
        entries = palette.entries(operand_types={PrimitiveType.I32})
        assert [e.name for e in entries] == ["i32.add"]

    def test_no_match_returns_none(self):
        palette = FunctionPalette.from_names(["f32.add"])
        assert palette.sample_random_entry(random.Random(0), result_type="i64") is None

    def test_sampling_is_uniform_enough(self):
        palette = FunctionPalette.from_names(["f32.add", "f32.mul"])
        rng = random.Random(11)
        names = {palette.sample_random_entry(rng).name for _ in range(50)}
        assert names == {"f32.add", "f32.mul"}


class TestFreezing:
    def test_target_and_freeze(self):
        palette = FunctionPalette.from_names(["f32.add"])
        palette.set_target_function("fit")
        palette.freeze()
        assert palette.frozen
        assert palette.target_function == "fit"

    def test_frozen_palette_rejects_changes(self):
        palette = FunctionPalette.from_names(["f32.add"]).freeze()
        with pytest.raises(ConfigurationError, match="frozen"):
            palette.register("f32.mul")
        with pytest.raises(ConfigurationError, match="frozen"):
            palette.set_target_function("fit")
