"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidReminderKeyError(DomainException):
    """Reminder key is not of the form loan|investor|YYYY-MM-DD"""

    pass
