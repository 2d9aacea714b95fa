from .order_service import OrderService
from .dispatch_service import DispatchService
from .rider_service import RiderService
from .merchant_service import MerchantService
from .user_service import UserService

__all__ = [
    'OrderService',
    'DispatchService',
    'RiderService',
    'MerchantService',
    'UserService',
]
