class FrameError(RuntimeError):
    """Base class for recoverable picture frame failures."""


class DecodeError(FrameError):
    """Raised when uploaded bytes are not a decodable image."""


class CatalogReadError(FrameError):
    """Raised when the pictures directory cannot be listed."""


class UnknownPictureError(FrameError):
    """Raised when an identifier is not part of the current catalog."""


class OutOfRangeError(FrameError):
    """Raised when an index falls outside the current catalog."""


class EmptyCatalogError(FrameError):
    """Raised when there is nothing to rotate to."""


class StoreError(FrameError):
    """Raised when a normalized picture cannot be written to the pictures directory."""


class RenderError(FrameError):
    """Base class for failures putting a picture on the panel."""


class RenderUnavailableError(RenderError):
    """Raised when the renderer command cannot be started."""


class RenderFailedError(RenderError):
    """Raised when the renderer ran but reported failure."""


class RendererBusyError(RenderError):
    """Raised when another render is still in flight."""
