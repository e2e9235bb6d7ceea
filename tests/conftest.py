import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CACHE_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gasrefill.db.base import Base, import_models
from gasrefill.db.deps import get_db
from gasrefill.main import app
from gasrefill.modules.cylinders.enums import CylinderSize, CylinderStatus, GasType
from gasrefill.modules.cylinders.schemas import Cylinder
from gasrefill.modules.refill.schemas import RefillPriceRule, RefillStation


@pytest.fixture
def engine():
    """Fresh in-memory database per test"""
    import_models()
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    """API client bound to the test database"""
    def override_get_db():
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# Snapshot builders for the pure engine tests
# =============================================================================

@pytest.fixture
def station():
    return RefillStation(id=1, name="GasDepo Pusat", address="Jl. Industri No 5, Cikarang")


def make_cylinder(
    cylinder_id,
    serial_code,
    gas_type=GasType.OXYGEN,
    size=CylinderSize.LARGE,
    status=CylinderStatus.EMPTY_REFILL,
    last_location="Gudang Utama",
):
    return Cylinder(
        id=cylinder_id,
        serial_code=serial_code,
        gas_type=gas_type,
        size=size,
        status=status,
        last_location=last_location,
    )


def make_rule(
    rule_id,
    price,
    sku_filter=None,
    gas_type=GasType.OXYGEN,
    size=CylinderSize.LARGE,
    station_id=1,
):
    return RefillPriceRule(
        id=rule_id,
        station_id=station_id,
        gas_type=gas_type,
        size=size,
        sku_filter=sku_filter,
        price=price,
        position=rule_id,
    )
