from app.models.base import BaseModel
from app.models.master_data import Base, AssetType
from app.models.user import User, ROLES
from app.models.personnel import Personnel
from app.models.inventory import InventoryRow, LedgerMovement, AssetUnit
from app.models.transfer import Transfer
from app.models.purchase import Purchase
from app.models.expenditure import Expenditure
from app.models.assignment import Assignment
from app.models.logging import ActivityLog

__all__ = [
    'BaseModel',
    'Base', 'AssetType',
    'User', 'ROLES',
    'Personnel',
    'InventoryRow', 'LedgerMovement', 'AssetUnit',
    'Transfer',
    'Purchase',
    'Expenditure',
    'Assignment',
    'ActivityLog'
]
