"""Error taxonomy shared by the content store and the HTTP layer."""


class LumaError(Exception):
    """Base class for all L.U.M.A errors."""


class RemoteUnavailable(LumaError):
    """The remote row store or the object store could not be reached."""

    def __init__(self, operation, target, cause=None):
        self.operation = operation
        self.target = target
        self.cause = cause
        message = f'{operation} on {target} failed'
        if cause is not None:
            message = f'{message}: {cause}'
        super().__init__(message)


class QuotaExceededError(LumaError):
    """A local cache write would exceed the configured capacity."""

    def __init__(self, key, size, capacity):
        self.key = key
        self.size = size
        self.capacity = capacity
        super().__init__(f'writing {size} bytes to {key!r} exceeds cache capacity of {capacity} bytes')


class MalformedInput(LumaError):
    """Request payload rejected before it reaches the store."""

    def __init__(self, errors):
        self.errors = errors
        super().__init__('invalid input')
