class HRServiceError(Exception):
    """Base class for domain errors raised by the service layer."""


class NotFoundError(HRServiceError):
    pass


class EmployeeNotFoundError(NotFoundError):
    pass


class ReminderNotFoundError(NotFoundError):
    pass


class ConflictError(HRServiceError):
    pass


class TemplateUnavailableError(HRServiceError):
    """A task template exists but cannot be used for the requested type."""


class NoRecipientsError(HRServiceError):
    pass


class MailDeliveryError(HRServiceError):
    pass


class MailNotConfiguredError(HRServiceError):
    pass


class ReminderDispatchError(HRServiceError):
    """Raised when a manual send reached none of its recipients."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("Failed to send: " + "; ".join(errors))


class AuthenticationError(HRServiceError):
    pass
