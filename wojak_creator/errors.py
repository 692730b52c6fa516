class WojakError(Exception):
    """Base class for all composition engine errors."""


class ManifestError(WojakError):
    """Raised when the asset catalogue cannot be loaded consistently."""


class RuleCycleError(WojakError):
    """Raised when the rule resolver does not settle within its pass budget."""

    def __init__(self, passes: int, last_changes: dict):
        self.passes = passes
        self.last_changes = last_changes
        super().__init__(
            f"Rules did not reach a fixed point after {passes} passes "
            f"(still changing: {sorted(last_changes)})"
        )


class CompositionError(WojakError):
    """Raised when a selected asset has no paint slot."""


class AssetLoadError(WojakError):
    """Raised by bitmap loading when an asset cannot be fetched or decoded."""

    def __init__(self, path: str, cause: Exception = None):
        self.path = path
        self.cause = cause
        message = f"Could not load asset {path!r}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
