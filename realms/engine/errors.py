# realms/engine/errors.py
"""Exception types raised inside the engine."""


class RealmsError(Exception):
    """Base class for engine errors."""


class AreaLoadError(RealmsError):
    """An area document could not be fetched or is malformed."""

    def __init__(self, area_id: str, reason: str) -> None:
        super().__init__(f"Failed to load area '{area_id}': {reason}")
        self.area_id = area_id
        self.reason = reason


class SaveError(RealmsError):
    """A save snapshot could not be written or read back."""
