"""Exceptions raised by image acquisition.

Only resource unavailability is an error. Degenerate gestures and
premature capture requests are routine input and never raise.
"""


class ProfileFrameError(Exception):
    """Base class for application errors."""


class AcquisitionFailure(ProfileFrameError):
    """Camera or source file could not be opened, read or decoded."""


class TemplateLoadFailure(ProfileFrameError):
    """Overlay template could not be loaded; capture stays disabled."""
