"""Minibatch layout handles and frame ranges.

A layout describes how the columns of a minibatch map to (parallel sequence,
time step) pairs. Layouts are compared by identity: two layouts with the same
sizes are still different layouts, because they describe different sequences.
"""

__docformat__ = "restructuredtext"
__all__ = ["FrameRange", "MBLayout", "tensor_slice_for"]

from dataclasses import dataclass

from graphshape.errors import InvalidFrameRangeError, LayoutMismatchError


class MBLayout:
    """Column layout of a minibatch of parallel sequences.

    Columns are ordered time-major: column ``t * S + s`` holds time step ``t``
    of parallel sequence ``s``.

    :param num_parallel_sequences: Number of sequences laid out side by side (S)
    :param num_time_steps: Number of time steps per sequence (T)
    """

    def __init__(self, num_parallel_sequences: int = 1, num_time_steps: int = 1):
        self.init(num_parallel_sequences, num_time_steps)

    def init(self, num_parallel_sequences: int, num_time_steps: int) -> None:
        """Reset the layout to new sizes (identity is preserved)."""
        if num_parallel_sequences < 1 or num_time_steps < 1:
            raise ValueError(
                f"MBLayout needs at least one sequence and one time step, "
                f"got ({num_parallel_sequences}, {num_time_steps})"
            )
        self.num_parallel_sequences = num_parallel_sequences
        self.num_time_steps = num_time_steps

    @property
    def num_cols(self) -> int:
        return self.num_parallel_sequences * self.num_time_steps

    def column_index(self, seq_index: int, time_index: int) -> int:
        """Get the matrix column of a (sequence, time step) pair."""
        if not 0 <= seq_index < self.num_parallel_sequences:
            raise IndexError(f"Sequence index {seq_index} out of range")
        if not 0 <= time_index < self.num_time_steps:
            raise IndexError(f"Time index {time_index} out of range")
        return time_index * self.num_parallel_sequences + seq_index

    def __repr__(self) -> str:
        return (
            f"MBLayout(S={self.num_parallel_sequences}, T={self.num_time_steps}, "
            f"id=0x{id(self):x})"
        )


@dataclass(frozen=True)
class FrameRange:
    """Selection of a time step and/or parallel sequence of a node's value.

    :param layout: Layout the request refers to (None for flat data)
    :param time_index: Time step to select (None = all frames)
    :param time_offset: Offset added to ``time_index``
    :param seq_index: Parallel sequence to select (None = all sequences)
    """

    layout: MBLayout | None = None
    time_index: int | None = None
    time_offset: int = 0
    seq_index: int | None = None

    @classmethod
    def all(cls, layout: MBLayout | None = None) -> "FrameRange":
        return cls(layout=layout)

    @classmethod
    def at(cls, layout: MBLayout | None, time_index: int) -> "FrameRange":
        return cls(layout=layout, time_index=time_index)

    def sequence(self, seq_index: int) -> "FrameRange":
        """Restrict this range to a single parallel sequence."""
        return FrameRange(self.layout, self.time_index, self.time_offset, seq_index)

    def with_offset(self, time_offset: int) -> "FrameRange":
        return FrameRange(self.layout, self.time_index, time_offset, self.seq_index)

    @property
    def is_all_frames(self) -> bool:
        return self.time_index is None


def tensor_slice_for(
    dims: tuple[int, ...],
    frame_range: FrameRange,
    layout: MBLayout | None,
) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Compute begin/end indices of a frame range within a full tensor.

    With a layout, the last two axes of ``dims`` are (sequence, time).

    :param dims: Full tensor dimensions
    :param frame_range: Requested frames
    :param layout: Layout of the data being sliced
    :return: Tuple of (begin, end) per axis
    """
    begin = [0] * len(dims)
    end = list(dims)

    # Only stepping through time needs the frame range to share the data's layout
    if not frame_range.is_all_frames and frame_range.layout is not layout:
        raise LayoutMismatchError(
            f"Frame range layout {frame_range.layout!r} is inconsistent with data layout {layout!r}"
        )

    if layout is None or frame_range.is_all_frames:
        if frame_range.time_offset != 0:
            raise InvalidFrameRangeError(
                "Time offset must not be specified for a frame range over the entire minibatch"
            )
        if layout is None and frame_range.seq_index is not None:
            raise InvalidFrameRangeError("Sequence index requires data with a layout")
        if layout is None:
            return tuple(begin), tuple(end)

    seq_axis = len(dims) - 2
    time_axis = len(dims) - 1

    # A broadcasting time axis (length 1) serves every requested time step
    if not frame_range.is_all_frames and end[time_axis] > 1:
        t = frame_range.time_index + frame_range.time_offset
        if not 0 <= t < end[time_axis]:
            raise InvalidFrameRangeError(
                f"Time index {t} out of range for {end[time_axis]} time steps"
            )
        begin[time_axis] = t
        end[time_axis] = t + 1

    if frame_range.seq_index is not None:
        s = frame_range.seq_index
        if not 0 <= s < end[seq_axis]:
            raise InvalidFrameRangeError(
                f"Parallel-sequence index {s} out of range for {end[seq_axis]} sequences"
            )
        begin[seq_axis] = s
        end[seq_axis] = s + 1

    return tuple(begin), tuple(end)
