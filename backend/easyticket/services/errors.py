"""Service-layer exceptions. Each carries the HTTP status it is rendered with."""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ServiceError):
    status_code = 400


class InvalidBookingInfo(ValidationError):
    pass


class PaymentNotCompleted(ValidationError):
    pass


class ExpiredBooking(ValidationError):
    pass


class NotFoundError(ServiceError):
    status_code = 404


class BookingNotFound(NotFoundError):
    pass


class TicketNotFound(NotFoundError):
    pass


class ConflictError(ServiceError):
    status_code = 409


class Oversell(ConflictError):
    pass


class UpstreamError(ServiceError):
    status_code = 500


class ProviderUnavailable(UpstreamError):
    pass
