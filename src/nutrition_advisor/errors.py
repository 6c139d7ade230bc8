"""Error taxonomy surfaced to users of the advisor."""


class AdvisorError(Exception):
    """Base class for user-facing advisor errors."""

    kind = "error"
    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AdvisorError):
    """A wizard step guard failed or a field value is malformed."""

    kind = "validation"


class QuotaExceededError(AdvisorError):
    """The free daily recommendation quota has been used up."""

    kind = "quota_exceeded"


class PersistenceError(AdvisorError):
    """Saving or loading profile, recommendation or usage data failed."""

    kind = "persistence"
    retryable = True


class GenerationError(AdvisorError):
    """The text generation call failed or returned nothing."""

    kind = "generation"
    retryable = True

    def __init__(self, message: str, *, timed_out: bool = False) -> None:
        super().__init__(message)
        self.timed_out = timed_out


class SubscriptionCheckError(AdvisorError):
    """Subscription status could not be confirmed."""

    kind = "subscription_check"
    retryable = True


class BillingError(AdvisorError):
    """Checkout or billing portal redirect could not be created."""

    kind = "billing"
    retryable = True
