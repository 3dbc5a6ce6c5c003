"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Caller supplied a malformed or ambiguous request."""

    pass


class BusinessRuleViolationError(DomainError):
    """Business rule violation error."""

    pass


class LastIdentityError(BusinessRuleViolationError):
    """Raised when an unlink would leave a user without any identity."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Cannot unlink the last identity for user {user_id}")


class NotAuthorizedError(DomainError):
    """Raised when a user acts on an identity they don't own."""

    def __init__(self, resource: str, resource_id: str, user_id: str):
        super().__init__(
            f"{resource} {resource_id} does not belong to user {user_id}"
        )


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class UnimplementedError(DomainError):
    """Raised for operations the service deliberately does not support."""

    pass


class IdentityConflictError(DomainError):
    """Raised when (provider, provider_user_id) is already linked."""

    def __init__(self, provider: str, provider_user_id: str):
        self.provider = provider
        self.provider_user_id = provider_user_id
        super().__init__(f"Identity already linked: {provider}/{provider_user_id}")


class RepositoryError(DomainError):
    """The backing store failed or was unreachable."""

    pass


class CorruptRecordError(DomainError):
    """Stored data violates an invariant the store should have enforced."""

    pass


class PrimaryIdentityConflictError(DomainError):
    """Raised when a second primary identity would be stored for a user."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User {user_id} already has a primary identity")
