"""Fixed-width little-endian encoding of numeric samples."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Union

import numpy as np

from .enums import PrimitiveType

NUMPY_DTYPES: Dict[PrimitiveType, np.dtype] = {
    PrimitiveType.F32: np.dtype("<f4"),
    PrimitiveType.F64: np.dtype("<f8"),
    PrimitiveType.I32: np.dtype("<i4"),
    PrimitiveType.I64: np.dtype("<i8"),
}

TypeLike = Union[PrimitiveType, str, int]


def numpy_dtype(dtype: TypeLike) -> np.dtype:
    return NUMPY_DTYPES[PrimitiveType.parse(dtype)]


def encoding_width(dtype: TypeLike) -> int:
    """Number of bytes one sample of ``dtype`` occupies."""
    return numpy_dtype(dtype).itemsize


def scalar(value: Any, dtype: TypeLike) -> np.generic:
    """Cast ``value`` to a numpy scalar of ``dtype``."""
    return numpy_dtype(dtype).type(value)


def encode(value: Any, dtype: TypeLike) -> bytes:
    """Serialize a single value."""
    return np.asarray([value], dtype=numpy_dtype(dtype)).tobytes()


def encode_array(values: Union[np.ndarray, Iterable[Any]], dtype: TypeLike) -> bytes:
    """Serialize a sequence of values into one flat buffer."""
    if not isinstance(values, np.ndarray):
        values = list(values)
    return np.asarray(values, dtype=numpy_dtype(dtype)).tobytes()


def decode(buffer: bytes, dtype: TypeLike) -> np.ndarray:
    """Deserialize a flat buffer; the length must be a multiple of the width."""
    np_dtype = numpy_dtype(dtype)
    if len(buffer) % np_dtype.itemsize:
        raise ValueError(
            f"Buffer of {len(buffer)} bytes is not a multiple of {np_dtype.itemsize}."
        )
    return np.frombuffer(buffer, dtype=np_dtype).copy()


def sample_count(buffer: bytes, dtype: TypeLike) -> int:
    return len(buffer) // encoding_width(dtype)


__all__ = [
    "NUMPY_DTYPES",
    "numpy_dtype",
    "encoding_width",
    "scalar",
    "encode",
    "encode_array",
    "decode",
    "sample_count",
]
