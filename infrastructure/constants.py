"""
Constants Module - Centralized configuration values
===================================================

Single source of truth for the values shared by the reservation domain,
the REST adapters and the media reconciliation code.
"""

# API defaults
DEFAULT_API_URL = "http://localhost:3001"
DEFAULT_TIMEZONE = "America/Bogota"

# Pagination
DEFAULT_PAGE_LIMIT = 20
USER_PAGE_LIMIT = 6
DASHBOARD_PAGE_LIMIT = 7

# Reservation states as the remote service names them
STATE_NAME_PENDING = "PENDIENTE"
STATE_NAME_CONFIRMED = "CONFIRMADA"
STATE_NAME_REJECTED = "RECHAZADA"
STATE_NAME_CANCELLED = "CANCELADA"

# Catalog ids used when the states endpoint has not been consulted
DEFAULT_STATE_IDS = {
    STATE_NAME_PENDING: 1,
    STATE_NAME_CONFIRMED: 2,
    STATE_NAME_REJECTED: 3,
    STATE_NAME_CANCELLED: 4,
}

# Weekday ordinals follow the remote service: 0 = Sunday ... 6 = Saturday
WEEKDAY_ORDINALS = range(0, 7)
WEEKDAYS_ES = ['DOMINGO', 'LUNES', 'MARTES', 'MIÉRCOLES', 'JUEVES', 'VIERNES', 'SÁBADO']
WEEKDAYS_EN = ['SUNDAY', 'MONDAY', 'TUESDAY', 'WEDNESDAY', 'THURSDAY', 'FRIDAY', 'SATURDAY']

# Confirmation without payment proof
MAX_JUSTIFICATION_LENGTH = 500

# Facility media
IMAGE_SLOT_NAMES = ("featured", "additional1", "additional2")
MAX_IMAGE_SIZE = 5 * 1024 * 1024  # matches the remote upload limit
ALLOWED_IMAGE_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
})


# Cache tags shared by the repositories and the services that invalidate them
class CacheTags:
    """Builders for the tags attached to cached remote reads."""

    RESERVATIONS = "reservations"
    TIMESLOTS = "timeslots"
    AVAILABILITY = "availability"
    RESERVATION_STATES = "reservation-states"

    @staticmethod
    def reservation(reservation_id: int) -> str:
        return f"reservation-{reservation_id}"

    @staticmethod
    def user_reservations(user_id: int) -> str:
        return f"user-{user_id}-reservations"

    @staticmethod
    def scenario_reservations(facility_unit_id: int) -> str:
        return f"scenario-{facility_unit_id}-reservations"

    @staticmethod
    def timeslots(facility_unit_id: int, day=None) -> str:
        if day is None:
            return f"timeslots-{facility_unit_id}"
        return f"timeslots-{facility_unit_id}-{day.isoformat()}"

    @staticmethod
    def availability(facility_unit_id: int) -> str:
        return f"availability-{facility_unit_id}"
