"""
Exception types raised by the detection-and-routing core.

Only startup problems (no device, capture cannot be opened, bad config) are
fatal. Extraction failures are raised by detectors and absorbed by the chain.
"""

from __future__ import annotations


class PayloadRouterError(Exception):
    """Base class for all payload_router errors."""


class NoDeviceError(PayloadRouterError):
    """The capture collaborator enumerated no devices."""


class CaptureOpenError(PayloadRouterError):
    """The selected capture device could not be opened."""


class ConfigError(PayloadRouterError):
    """The settings file exists but could not be parsed or validated."""


class ExtractionError(PayloadRouterError):
    """A detector accepted a payload but failed to extract a record from it."""
