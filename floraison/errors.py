"""Exception types raised by the geometry engine."""


class FloraisonError(Exception):
    """Base class for all engine errors."""
    pass


class GeometryError(FloraisonError, ValueError):
    """Raised when geometry cannot be constructed from the given inputs.

    Covers malformed control grids and knot vectors, segment or sample
    counts below their minimum, and curves with too few points.
    """
    pass


class ParameterError(FloraisonError, ValueError):
    """Raised when a parameter set or request document is malformed."""
    pass


class RecursionDepthError(ParameterError):
    """Raised when a compound pattern asks for more recursion than allowed."""
    pass
