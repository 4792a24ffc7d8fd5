"""Domain Enums"""
from enum import Enum


class ReservationStatus(str, Enum):
    ACTIVE = "Active"
    CANCELED = "Canceled"
    CHECKED_IN = "CheckedIn"
    COMPLETED = "Completed"


class RecurrenceType(str, Enum):
    NONE = "None"
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"


class BoardType(str, Enum):
    """Meal plans that change pricing and occupancy. Any other value means no board."""
    FULL_BOARD = "Full Board"
    HALF_BOARD = "Half Board"
