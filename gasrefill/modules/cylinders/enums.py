from enum import Enum

class GasType(str, Enum):
    OXYGEN = "Oxygen"
    ACETYLENE = "Acetylene"
    ARGON = "Argon"
    CO2 = "CO2"
    NITROGEN = "Nitrogen"

class CylinderSize(str, Enum):
    SMALL = "1m3"
    MEDIUM = "2m3"
    LARGE = "6m3"

class CylinderStatus(str, Enum):
    AVAILABLE = "Available"
    RENTED = "Rented"
    EMPTY_REFILL = "Empty (Needs Refill)"
    REFILLING = "Refilling"
    DAMAGED = "Damaged"


def enum_values(enum_cls) -> list[str]:
    """Persist enums by value rather than by member name"""
    return [member.value for member in enum_cls]
