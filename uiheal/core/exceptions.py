class HealingError(RuntimeError):
    """Raised when locator healing fails."""


class SelectorValidationError(HealingError):
    """Raised when a candidate locator does not resolve to exactly one element."""


class LocatorError(RuntimeError):
    """Raised when the page rejects a locator or a script."""
