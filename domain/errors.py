"""Domain Errors"""


class NotFoundError(Exception):
    """Requested entity does not exist"""


class InvalidOperationError(ValueError):
    """Business rule violation"""


class RoomNotFoundError(InvalidOperationError):
    def __init__(self, message: str = "Room type not found"):
        super().__init__(message)


class NoCapacityError(InvalidOperationError):
    def __init__(self, message: str = "No available room numbers for the selected type and dates."):
        super().__init__(message)
