class DomainError(Exception):
    """Base class for all domain-level errors."""

    pass


class ValidationError(DomainError):
    """Input has the wrong shape; raised before the store is touched."""

    pass


class InvalidIdentifier(ValidationError):
    """The identifier is not a well-formed email address."""

    pass


class InvalidSecretFormat(ValidationError):
    """The presented token or code cannot possibly be a valid secret."""

    pass


class InvalidOrExpired(DomainError):
    """
    The presented secret was not accepted.

    Covers an unknown identifier, a wrong secret, an expired credential and a
    credential already consumed by a concurrent request. Callers get no hint
    about which of these happened.
    """

    pass


class StoreFailure(DomainError):
    """The credential store raised; the original exception is chained."""

    pass


class DeliveryFailure(DomainError):
    """The credential was persisted but the out-of-band send failed."""

    pass
