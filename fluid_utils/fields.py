"""
Grid field storage: zero-initialized 2D warp arrays and read/write double buffers.
"""
import logging

import warp as wp

from fluid_utils.errors import AllocationError
from fluid_utils.structs import GridModel

logger = logging.getLogger(__name__)

# Channel count -> warp element type. 3-channel layouts are not supported by
# the compute target (no random-write RGB formats), pad to 4 instead.
CHANNEL_DTYPES = {
    1: wp.float32,
    2: wp.vec2,
    4: wp.vec4,
}


class GridField:
    """A fixed-size 2D buffer of float samples indexed [x, y]."""

    def __init__(self, data, width, height, channels):
        self.data = data
        self.width = width
        self.height = height
        self.channels = channels

    @property
    def released(self):
        return self.data is None

    @property
    def device(self):
        return None if self.data is None else self.data.device

    def model(self):
        """Build the GridModel struct describing this field's grid."""
        model = GridModel()
        model.width = self.width
        model.height = self.height
        model.texel_size = wp.vec2(1.0 / self.width, 1.0 / self.height)
        return model

    def numpy(self):
        return self.data.numpy()

    def __repr__(self):
        state = "released" if self.released else str(self.device)
        return f"GridField({self.width}x{self.height}, channels={self.channels}, {state})"


class DoubleBuffer:
    """
    Ordered (read, write) pair of same-shaped GridFields.

    Passes read from `read`, write into `write`, then call `swap()` so the
    freshly written data becomes `read`.
    """

    def __init__(self, read: GridField, write: GridField):
        if (read.width, read.height, read.channels) != (write.width, write.height, write.channels):
            raise AllocationError(f"double buffer halves differ in shape: {read!r} vs {write!r}")
        self.read = read
        self.write = write

    @property
    def width(self):
        return self.read.width

    @property
    def height(self):
        return self.read.height

    @property
    def channels(self):
        return self.read.channels

    @property
    def released(self):
        return self.read.released and self.write.released

    def swap(self):
        self.read, self.write = self.write, self.read
        return self

    def model(self):
        return self.read.model()

    def __repr__(self):
        return f"DoubleBuffer(read={self.read!r}, write={self.write!r})"


def allocate(width, height, channels, device=None) -> GridField:
    """
    Allocate a zero-initialized grid field.

    Args:
        width (int): Number of cells along x. Must be positive.
        height (int): Number of cells along y. Must be positive.
        channels (int): Samples per cell, one of 1, 2 or 4.
        device: Warp device to allocate on (None = current warp device).

    Raises:
        AllocationError: On non-positive dimensions or an unsupported channel layout.
    """
    if int(width) != width or int(height) != height or width <= 0 or height <= 0:
        raise AllocationError(f"grid dimensions must be positive integers, got {width}x{height}")
    if channels not in CHANNEL_DTYPES:
        raise AllocationError(
            f"unsupported channel layout {channels}, expected one of {sorted(CHANNEL_DTYPES)}"
        )
    try:
        data = wp.zeros(shape=(int(width), int(height)), dtype=CHANNEL_DTYPES[channels], device=device)
    except (RuntimeError, MemoryError) as e:
        raise AllocationError(f"failed to allocate {width}x{height}x{channels} field: {e}") from e
    return GridField(data, int(width), int(height), channels)


def allocate_double(width, height, channels, device=None) -> DoubleBuffer:
    return DoubleBuffer(
        allocate(width, height, channels, device=device),
        allocate(width, height, channels, device=device),
    )


def release(field):
    """Release a GridField or DoubleBuffer. Releasing None or an already released field is a no-op."""
    if field is None:
        return
    if isinstance(field, DoubleBuffer):
        release(field.read)
        release(field.write)
        return
    field.data = None
