from enum import Enum

class TransactionKind(str, Enum):
    RENTAL_OUT = "RENTAL_OUT"
    RETURN = "RETURN"
    REFILL_OUT = "REFILL_OUT"  # Batch dispatched to a refill station
    REFILL_IN = "REFILL_IN"  # Batch received back from a refill station
