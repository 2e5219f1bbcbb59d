class ProfileKitError(Exception):
    """Base class for errors raised by profile_kit."""


class InvalidImage(ProfileKitError, ValueError):
    """The image could not be decoded or has no pixels."""


class ModelInitializationError(ProfileKitError, RuntimeError):
    """An inference backend could not be built from its model artifacts."""
