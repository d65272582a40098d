from .inventory import InventoryUnit, InventoryAccessory
from .sales import SaleRecord
from .auth import User, SessionToken

__all__ = [
    'InventoryUnit', 'InventoryAccessory',
    'SaleRecord',
    'User', 'SessionToken',
]
