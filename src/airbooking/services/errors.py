"""
Service-layer exceptions

Routes map the four families onto HTTP status codes.
"""


class ServiceError(Exception):
    """Base exception for service errors"""
    status_code = 500


class ValidationError(ServiceError):
    """Caller input rejected before any write"""
    status_code = 400


class NotFoundError(ServiceError):
    """Referenced record does not exist"""
    status_code = 404


class ConflictError(ServiceError):
    """Uniqueness violation"""
    status_code = 409


class ResourceExhaustedError(ServiceError):
    """A bounded retry loop gave up"""
    status_code = 503


class FlightNotFoundError(NotFoundError):
    pass


class AircraftNotFoundError(NotFoundError):
    pass


class AirportNotFoundError(NotFoundError):
    pass


class BookingNotFoundError(NotFoundError):
    pass


class FlightValidationError(ValidationError):
    pass


class SeatValidationError(ValidationError):
    pass


class DuplicateSeatError(ConflictError):
    pass


class DuplicateAirportError(ConflictError):
    pass
