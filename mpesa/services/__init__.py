"""
Service modules for M-PESA API operations.
"""

from .auth_service import AuthService
from .account_service import AccountService
from .b2b_service import B2BService
from .b2c_service import B2CService
from .bill_manager_service import BillManagerService
from .c2b_service import C2BService
from .express_service import ExpressService
from .qr_service import QRService
from .transaction_service import TransactionService

__all__ = [
    'AuthService',
    'AccountService',
    'B2BService',
    'B2CService',
    'BillManagerService',
    'C2BService',
    'ExpressService',
    'QRService',
    'TransactionService',
]
