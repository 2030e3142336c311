"""Domain exceptions."""


class ScopeGuardError(Exception):
    """Base exception for ScopeGuard."""

    pass


class ValidationError(ScopeGuardError):
    """Validation failed for input data."""

    pass


class ForbiddenError(ScopeGuardError):
    """Actor does not have permission for the requested action."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class CustomActionTriggerForbiddenError(ForbiddenError):
    """Actor may not trigger the custom action on the targeted records."""

    def __init__(self, message: str = "You don't have permission to trigger this action.") -> None:
        super().__init__(message)


class ApprovalNotAllowedError(ForbiddenError):
    """Actor may not approve the custom action on the targeted records."""

    def __init__(
        self,
        role_ids: list[int | str] | None = None,
        message: str = "You don't have permission to approve this action.",
    ) -> None:
        super().__init__(message)
        self.role_ids = role_ids or []


class CustomActionRequiresApprovalError(ForbiddenError):
    """Triggering was allowed but the action must be approved first."""

    def __init__(
        self,
        role_ids_allowed_to_approve: list[int | str],
        message: str = "This action requires to be approved.",
    ) -> None:
        super().__init__(message)
        self.role_ids_allowed_to_approve = role_ids_allowed_to_approve


class BadRequestError(ScopeGuardError):
    """Malformed or disallowed input from the caller."""

    pass


class RecordsOutOfScopeError(BadRequestError):
    """Explicitly selected records fall outside the actor's scope."""

    def __init__(self, message: str = "target records are out of scope") -> None:
        super().__init__(message)


class SignatureVerificationError(BadRequestError):
    """Signed action parameters could not be verified."""

    pass


class ChartQueryError(ScopeGuardError):
    """Raw chart query failed validation."""

    pass


class EmptySQLQueryError(ChartQueryError):
    """Chart query is empty."""

    pass


class ChainedSQLQueryError(ChartQueryError):
    """Chart query chains several statements."""

    pass


class NonSelectSQLQueryError(ChartQueryError):
    """Chart query is not a SELECT."""

    pass
