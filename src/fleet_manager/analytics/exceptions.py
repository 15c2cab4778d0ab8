from http import HTTPStatus

from fastapi import HTTPException


class AnalyticsException(HTTPException):
    """Base exception class for analytics errors."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    message = "An error occurred while generating analytics."

    def __init__(
        self,
        status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR,
        message: str = "An error occurred while generating analytics.",
    ):
        self.status_code = status_code
        self.message = message or self.message
        super().__init__(status_code=status_code, detail=self.message)


class VehicleNotFoundException(AnalyticsException):
    """Exception for when the vehicle ID does not exist in the database."""

    status_code = HTTPStatus.NOT_FOUND
    message = "Vehicle not found."

    def __init__(self, vehicle_id: int):
        self.vehicle_id = vehicle_id
        message = f"{self.message} Vehicle ID: {vehicle_id}"
        super().__init__(status_code=self.status_code, message=message)
