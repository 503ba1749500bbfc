"""Tensor shape descriptor.

Dimensions are stored column-major: the first axis is the fastest-varying one,
so a dense shape has strides ``[1, d0, d0*d1, ...]``. A narrowed shape keeps the
strides of the shape it came from and shifts its storage offset, which makes it
a view of the same storage rather than a copy.
"""

__docformat__ = "restructuredtext"
__all__ = ["TensorShape", "dense_strides"]

import math
from dataclasses import dataclass

import torch


def dense_strides(dims: tuple[int, ...]) -> tuple[int, ...]:
    """Compute column-major strides for densely packed dimensions.

    :param dims: Dimension sizes
    :return: Stride per dimension
    """
    strides = []
    stride = 1
    for dim in dims:
        strides.append(stride)
        stride *= dim
    return tuple(strides)


@dataclass(frozen=True)
class TensorShape:
    """Ordered dimensions with optional strides and storage offset.

    :param dims: Dimension sizes (0 means unresolved)
    :param strides: Per-dimension strides (None = dense column-major)
    :param offset: Storage offset of the first element
    """

    dims: tuple[int, ...] = ()
    strides: tuple[int, ...] | None = None
    offset: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "dims", tuple(int(d) for d in self.dims))
        if any(d < 0 for d in self.dims):
            raise ValueError(f"Negative dimension in {list(self.dims)}")
        if self.strides is None:
            object.__setattr__(self, "strides", dense_strides(self.dims))
        else:
            object.__setattr__(self, "strides", tuple(int(s) for s in self.strides))
            if len(self.strides) != len(self.dims):
                raise ValueError(
                    f"Got {len(self.strides)} strides for {len(self.dims)} dimensions"
                )

    @classmethod
    def of(cls, *dims: int) -> "TensorShape":
        """Create a dense shape from positional dimensions."""
        return cls(tuple(dims))

    @property
    def rank(self) -> int:
        return len(self.dims)

    @property
    def num_elements(self) -> int:
        return math.prod(self.dims)

    @property
    def is_resolved(self) -> bool:
        """True if the shape has at least one axis and no axis is 0."""
        return self.rank > 0 and all(d > 0 for d in self.dims)

    @property
    def is_dense(self) -> bool:
        return self.offset == 0 and self.strides == dense_strides(self.dims)

    def __len__(self) -> int:
        return len(self.dims)

    def __getitem__(self, axis: int) -> int:
        return self.dims[axis]

    def __iter__(self):
        return iter(self.dims)

    def __str__(self) -> str:
        return "[" + " x ".join(str(d) for d in self.dims) + "]"

    def _next_stride(self) -> int:
        if not self.dims:
            return 1
        return self.strides[-1] * self.dims[-1]

    def pad_rank(self, rank: int) -> "TensorShape":
        """Pad to the given rank with trailing size-1 dimensions.

        :param rank: Target rank (must not be smaller than the current rank)
        :return: Padded shape (same storage offset)
        """
        if rank < self.rank:
            raise ValueError(f"Cannot pad shape {self} of rank {self.rank} down to rank {rank}")
        dims = list(self.dims)
        strides = list(self.strides)
        while len(dims) < rank:
            strides.append(strides[-1] * dims[-1] if dims else 1)
            dims.append(1)
        return TensorShape(tuple(dims), tuple(strides), self.offset)

    def append(self, position: int, dim: int) -> "TensorShape":
        """Append a trailing dimension at the given axis position.

        Axes between the current rank and ``position`` are padded with 1.

        :param position: Axis index the new dimension will occupy
        :param dim: Size of the new dimension
        :return: Extended shape
        """
        padded = self.pad_rank(position)
        return TensorShape(
            padded.dims + (dim,),
            padded.strides + (padded._next_stride(),),
            padded.offset,
        )

    def narrow_to(self, begin: tuple[int, ...], end: tuple[int, ...]) -> "TensorShape":
        """Restrict every axis to ``[begin[k], end[k])``.

        Strides are kept, so the result indexes the same storage.

        :param begin: Start index per axis
        :param end: Stop index per axis (exclusive)
        :return: Narrowed view
        """
        if len(begin) != self.rank or len(end) != self.rank:
            raise ValueError(
                f"Slice rank {len(begin)}/{len(end)} does not match shape rank {self.rank}"
            )
        offset = self.offset
        dims = []
        for k, (b, e) in enumerate(zip(begin, end, strict=True)):
            if not 0 <= b <= e <= self.dims[k]:
                raise ValueError(f"Slice [{b}, {e}) out of bounds for axis {k} of shape {self}")
            offset += self.strides[k] * b
            dims.append(e - b)
        return TensorShape(tuple(dims), self.strides, offset)

    def as_strided(self, storage: torch.Tensor) -> torch.Tensor:
        """View flat storage through this shape without copying.

        :param storage: One-dimensional tensor holding the full object
        :return: Strided view with ``size == dims``
        """
        return torch.as_strided(
            storage, size=self.dims, stride=self.strides, storage_offset=self.offset
        )
