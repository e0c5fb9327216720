"""Exception hierarchy for the lava lamp."""


class LavaLampError(Exception):
    """Base exception for all lava lamp errors."""


class ConfigError(LavaLampError):
    """Raised when a configuration value is missing or out of range."""


class SheetLoadError(LavaLampError):
    """Raised when a single tier's sprite sheet cannot be used."""


class DimensionMismatchError(SheetLoadError):
    """Raised when a sheet's height or width does not fit the frame size."""


class EmptySheetError(SheetLoadError):
    """Raised when a sheet contains no frames at all."""


class UnreadableSheetError(SheetLoadError):
    """Raised when a sheet file is missing or cannot be decoded."""


class FatalAssetError(LavaLampError):
    """Raised when not even the fallback tier's sheet is available."""


class MetricUnavailableError(LavaLampError):
    """Raised by a sampler that cannot produce a reading right now."""


class CompositeError(LavaLampError):
    """Raised when a frame cannot be rendered (bad index or scale factor)."""
