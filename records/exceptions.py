"""Record lookup errors.

Raised by the "require exactly one" accessors of the resolvers. The search
operations themselves never raise for a miss; they return an empty list.
"""


class BusinessError(Exception):
    """Base class for domain errors raised by record lookups."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CustomerNotFoundError(BusinessError):
    """No customer matched the lookup."""
    pass


class EmployeeNotFoundError(BusinessError):
    """No employee matched the lookup."""
    pass


class CompanyNotFoundError(BusinessError):
    """No external company matched the lookup."""
    pass
