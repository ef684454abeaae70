"""Exceptions raised by the ink engine."""


class InkError(Exception):
    """Base class for all ink engine errors."""


class OutOfBounds(InkError, IndexError):
    """Grid coordinate outside the grid extent."""

    def __init__(self, x, y, width: int, height: int):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        super().__init__(f"No cell at ({x}, {y}) in a {width}x{height} grid")


class DimensionMismatch(InkError, ValueError):
    """Grid buffers or framebuffer disagree in shape."""

    def __init__(self, name: str, expected, actual):
        self.name = name
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        super().__init__(f"{name} has shape {self.actual}, expected {self.expected}")


class InvalidParams(InkError, ValueError):
    """Simulation parameters outside their valid range."""


class InvalidStroke(InkError, ValueError):
    """Pointer samples that cannot be mapped to grid cells."""
