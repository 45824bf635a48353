"""Tests for the fixed-width numeric codec."""

import numpy as np
import pytest

from funcsynth import ConfigurationError, PrimitiveType, codec


class TestEncoding:
    def test_f32_is_little_endian_ieee754(self):
        assert codec.encode(1.0, "f32") == b"\x00\x00\x80\x3f"
        assert codec.encode(-2.0, PrimitiveType.F32) == b"\x00\x00\x00\xc0"

    def test_integer_encoding(self):
        assert codec.encode(1, "i32") == b"\x01\x00\x00\x00"
        assert codec.encode(-1, "i64") == b"\xff" * 8

    def test_widths(self):
        assert codec.encoding_width("f32") == 4
        assert codec.encoding_width("f64") == 8
        assert codec.encoding_width("i32") == 4
        assert codec.encoding_width("i64") == 8

    def test_encode_array_concatenates_samples(self):
        buffer = codec.encode_array([0.0, 1.0, 2.0], "f32")
        assert len(buffer) == 12
        assert buffer[4:8] == codec.encode(1.0, "f32")

    def test_unknown_type_is_configuration_error(self):
        with pytest.raises(ConfigurationError, match="Unknown primitive type"):
            codec.encoding_width("f16")


class TestDecoding:
    def test_round_trip_is_exact(self):
        values = np.array([0.1, -3.5, 1e30, 7.0], dtype=np.float32)
        decoded = codec.decode(codec.encode_array(values, "f32"), "f32")
        assert decoded.dtype == np.float32
        assert np.array_equal(decoded, values)

    def test_decode_rejects_partial_samples(self):
        with pytest.raises(ValueError, match="not a multiple"):
            codec.decode(b"\x00" * 6, "f32")

    def test_decoded_array_is_writable(self):
        decoded = codec.decode(codec.encode_array([1, 2], "i32"), "i32")
        decoded[0] = 5
        assert decoded.tolist() == [5, 2]

    def test_sample_count(self):
        assert codec.sample_count(b"\x00" * 16, "f64") == 2
