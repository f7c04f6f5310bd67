from .inventory import Product, ProductCodeSequence, Accessory, ACCESSORY_TYPES
from .sales import Sale, SaleAccessory
from .ledger import MonthlyPeriod, Debt
from .settings import AppSetting, GateSession

__all__ = [
    'Product', 'ProductCodeSequence', 'Accessory', 'ACCESSORY_TYPES',
    'Sale', 'SaleAccessory',
    'MonthlyPeriod', 'Debt',
    'AppSetting', 'GateSession',
]
