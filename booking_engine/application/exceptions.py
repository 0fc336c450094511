class ClassifierUpstreamError(RuntimeError):
    """Raised when the classifier provider fails (timeouts, network errors, service unavailable)."""
    pass


class ClassifierContractError(RuntimeError):
    """Raised when the classifier adapter violates its contract (bad format or missing data)."""
    pass


class CalendarUnavailableError(RuntimeError):
    """Raised when the calendar provider cannot be reached or rejects a request."""
    pass


class TenantNotFoundError(LookupError):
    pass


class TenantConfigError(ValueError):
    """Raised when a tenant record fails validation at the loading boundary."""
    pass
