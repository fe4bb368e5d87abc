class ExternalStoreError(RuntimeError):
    """An external store rejected or failed a read/write."""

    def __init__(self, message: str, *, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause
