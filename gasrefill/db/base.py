from sqlalchemy.orm import declarative_base

Base = declarative_base()


def import_models() -> None:
    """Register every model on Base.metadata before create_all"""
    from gasrefill.modules.cylinders import models as cylinder_models  # noqa: F401
    from gasrefill.modules.refill import models as refill_models  # noqa: F401
    from gasrefill.modules.transactions import models as transaction_models  # noqa: F401
