class RenderError(Exception):
    pass


class ConfigurationError(RenderError, ValueError):
    """Raised when a scene, a shape or the settings can't be rendered."""


class DegenerateVectorError(RenderError, ValueError):
    """Raised when a zero-length vector would have to be normalized."""
