"""Exceptions raised by the coloring core."""


class ColoringError(Exception):
    pass


class ImageLoadError(ColoringError):
    """The source image could not be fetched or decoded."""


class RestoreError(ColoringError):
    """A saved snapshot does not fit the loaded artwork."""
