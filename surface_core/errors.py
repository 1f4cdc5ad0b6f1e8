"""
Error kinds raised by the surface pipeline.

Every error derives from SurfaceVisualizerError and from the built-in
exception it specializes, so callers may catch either.
"""


class SurfaceVisualizerError(Exception):
    """Base class for all visualizer errors."""


class InferenceUnavailable(SurfaceVisualizerError, RuntimeError):
    """The segmentation collaborator failed to load or run."""


class MalformedMask(SurfaceVisualizerError, ValueError):
    """A raw mask has invalid dimensions or data length."""


class EmptyRegion(SurfaceVisualizerError, ValueError):
    """A raw mask has no occupied pixel. Dropped silently by the encoder."""


class AssetLoadFailure(SurfaceVisualizerError, RuntimeError):
    """A texture asset could not be loaded."""


class InvalidSelection(SurfaceVisualizerError, ValueError):
    """A binding or selection request does not reference a valid target."""
