from typing import Dict, List, Optional


class BookingError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(BookingError):
    status_code = 400

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict:
        return {"message": self.message, "errors": self.errors}


class NotFoundError(BookingError):
    status_code = 404


class PaymentStateError(BookingError):
    status_code = 409


class ProviderError(BookingError):
    status_code = 502


class PaymentFailedError(ProviderError):
    """The payment provider reported a status outside the success set."""
    status_code = 400

    def __init__(self, provider_status: str):
        super().__init__(f"Payment not successful. Status: {provider_status}")
        self.provider_status = provider_status


class PersistenceError(BookingError):
    status_code = 500
