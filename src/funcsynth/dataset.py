"""Serialized sample datasets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Sequence, Tuple, Union

import numpy as np

from . import codec
from .enums import PrimitiveType
from .errors import ConfigurationError

TypeLike = Union[PrimitiveType, str, int]


def _parse_types(types: Iterable[TypeLike], role: str) -> Tuple[PrimitiveType, ...]:
    parsed = tuple(PrimitiveType.parse(t) for t in types)
    if not parsed:
        raise ConfigurationError(f"Dataset needs at least one {role} channel.")
    return parsed


@dataclass(frozen=True)
class Dataset:
    """
    One flat byte buffer per input channel and per output channel.
    Every buffer of a role encodes the same number of samples.
    """

    inputs: Tuple[bytes, ...]
    outputs: Tuple[bytes, ...]
    input_types: Tuple[PrimitiveType, ...]
    output_types: Tuple[PrimitiveType, ...]

    def __post_init__(self):
        object.__setattr__(self, "inputs", tuple(bytes(b) for b in self.inputs))
        object.__setattr__(self, "outputs", tuple(bytes(b) for b in self.outputs))
        object.__setattr__(self, "input_types", _parse_types(self.input_types, "input"))
        object.__setattr__(self, "output_types", _parse_types(self.output_types, "output"))
        self._check_role("input", self.inputs, self.input_types)
        self._check_role("output", self.outputs, self.output_types)

    @staticmethod
    def _check_role(
        role: str, buffers: Tuple[bytes, ...], types: Tuple[PrimitiveType, ...]
    ) -> None:
        if len(buffers) != len(types):
            raise ConfigurationError(
                f"{len(buffers)} {role} buffers for {len(types)} {role} types."
            )
        counts = set()
        for idx, (buffer, dtype) in enumerate(zip(buffers, types)):
            width = codec.encoding_width(dtype)
            if len(buffer) % width:
                raise ConfigurationError(
                    f"{role} buffer {idx} is not a multiple of {width} bytes."
                )
            counts.add(len(buffer) // width)
        if len(counts) > 1:
            raise ConfigurationError(
                f"{role} buffers encode different sample counts: {sorted(counts)}."
            )

    @classmethod
    def from_values(
        cls,
        inputs: Sequence[Iterable[Any]],
        outputs: Sequence[Iterable[Any]],
        input_types: Iterable[TypeLike],
        output_types: Iterable[TypeLike],
    ) -> "Dataset":
        """Build a dataset from per-channel value columns."""
        input_types = _parse_types(input_types, "input")
        output_types = _parse_types(output_types, "output")
        return cls(
            inputs=tuple(codec.encode_array(v, t) for v, t in zip(inputs, input_types)),
            outputs=tuple(codec.encode_array(v, t) for v, t in zip(outputs, output_types)),
            input_types=input_types,
            output_types=output_types,
        )

    @property
    def sample_count(self) -> int:
        return codec.sample_count(self.inputs[0], self.input_types[0])

    @property
    def output_sample_count(self) -> int:
        return codec.sample_count(self.outputs[0], self.output_types[0])

    def decode_inputs(self) -> List[np.ndarray]:
        return [codec.decode(b, t) for b, t in zip(self.inputs, self.input_types)]

    def decode_outputs(self) -> List[np.ndarray]:
        return [codec.decode(b, t) for b, t in zip(self.outputs, self.output_types)]


def make_dataset(
    sample_size: int,
    mapping: Callable[..., Any],
    input_types: Iterable[TypeLike] = ("f32",),
    output_types: Iterable[TypeLike] = ("f32",),
) -> Dataset:
    """
    Generate a dataset from a numeric mapping.

    Every input channel holds the sample index ``i`` (cast to the channel's
    type), so all input channels are identical. ``mapping`` receives one
    numpy scalar per input channel and returns a scalar for a single output
    or a sequence with one value per output channel.

    Args:
        sample_size: Number of samples
        mapping: Function computing the expected outputs
        input_types: Type name of each input channel
        output_types: Type name of each output channel
    Returns:
        The serialized dataset
    """
    if sample_size < 1:
        raise ConfigurationError("Sample size must be a positive integer.")
    input_types = _parse_types(input_types, "input")
    output_types = _parse_types(output_types, "output")

    input_columns: List[List[Any]] = [[] for _ in input_types]
    output_columns: List[List[Any]] = [[] for _ in output_types]

    with np.errstate(all="ignore"):
        for i in range(sample_size):
            args = [codec.scalar(i, dtype) for dtype in input_types]
            for column, value in zip(input_columns, args):
                column.append(value)

            result = mapping(*args)
            if np.ndim(result) == 0:
                result = (result,)
            result = tuple(result)
            if len(result) != len(output_types):
                raise ConfigurationError(
                    f"Mapping returned {len(result)} values for {len(output_types)} outputs."
                )
            for column, value in zip(output_columns, result):
                column.append(value)

        return Dataset.from_values(input_columns, output_columns, input_types, output_types)


__all__ = ["Dataset", "make_dataset"]
