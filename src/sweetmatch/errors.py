"""Exception types raised by the engine."""


class SweetMatchError(Exception):
    """Base class for engine errors."""


class InvalidConfigError(SweetMatchError, ValueError):
    """Raised when a level configuration cannot be played."""


class OutOfBoundsCoordinateError(SweetMatchError, IndexError):
    """Raised when a coordinate lies outside the grid or outside the shape mask."""

    def __init__(self, position, reason: str = "out_of_bounds"):
        super().__init__(f"Coordinate {position!r} is not playable ({reason})")
        self.position = position
        self.reason = reason
