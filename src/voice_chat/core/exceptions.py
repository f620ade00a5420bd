"""Custom exception types shared across the voice chat package."""


class DeviceUnavailableError(RuntimeError):
    """Raised by device helpers when no usable audio hardware can be opened."""
