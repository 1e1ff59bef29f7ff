"""
Domain errors raised by the service layer.
Routers map NotFound to 404, Conflict to 409, PayloadTooLarge to 413 and any
other DomainError to 400.
"""


class DomainError(ValueError):
    pass


class NotFound(LookupError):
    def __init__(self, what: str):
        super().__init__(f"{what} not found")
        self.what = what


class Conflict(DomainError):
    pass


class InvalidStatusTransition(DomainError):
    pass


class VendorNotAssignable(DomainError):
    pass


class PayloadTooLarge(DomainError):
    pass


# Everything a router translates to an HTTP error response
SERVICE_ERRORS = (DomainError, NotFound)
