"""Domain errors raised by the services layer."""


class ConcurrentWriteError(RuntimeError):
    """Another writer updated a stored document since it was read."""

    def __init__(self, key: str, expected_version: int):
        self.key = key
        self.expected_version = expected_version
        super().__init__(
            f"Concurrent write detected on '{key}' (expected version {expected_version})"
        )


class DuplicateEmailError(ValueError):
    """An account with this email is already registered."""


class InvalidStatusTransitionError(ValueError):
    """A redeem request is no longer pending."""


class RedemptionError(ValueError):
    """A redemption request breaks the redeem rules."""
