# tests/conftest.py
import pytest
from refillr.services import DispatchService, MerchantService, OrderService, RiderService, UserService
from .fakes import MERCHANT_OWNER, InMemoryDatabase

@pytest.fixture
def db():
    return InMemoryDatabase()

@pytest.fixture
def merchant(db):
    return db.add_merchant(owner_user_id=MERCHANT_OWNER)

@pytest.fixture
def order_service(db):
    return OrderService(db)

@pytest.fixture
def dispatch_service(db):
    return DispatchService(db)

@pytest.fixture
def rider_service(db):
    return RiderService(db)

@pytest.fixture
def merchant_service(db):
    return MerchantService(db)

@pytest.fixture
def user_service(db):
    return UserService(db)
