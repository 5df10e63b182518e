"""
Endpoint descriptors consumed by ``Mpesa.send``.
"""

from dataclasses import dataclass
from typing import Type

from . import schemas
from .constants import APIEndpoints


@dataclass(frozen=True)
class Endpoint:
    """How to call one remote operation and how to read its answer."""
    name: str
    path: str
    response_model: Type[schemas.MpesaResponse]
    method: str = 'POST'
    requires_auth: bool = True
    requires_security_credential: bool = False


ACCOUNT_BALANCE = Endpoint(
    'account_balance', APIEndpoints.ACCOUNT_BALANCE, schemas.AccountBalanceResponse,
    requires_security_credential=True,
)
B2B = Endpoint(
    'b2b', APIEndpoints.B2B, schemas.B2BResponse,
    requires_security_credential=True,
)
B2C = Endpoint(
    'b2c', APIEndpoints.B2C, schemas.B2CResponse,
    requires_security_credential=True,
)
TRANSACTION_REVERSAL = Endpoint(
    'transaction_reversal', APIEndpoints.TRANSACTION_REVERSAL, schemas.TransactionReversalResponse,
    requires_security_credential=True,
)
TRANSACTION_STATUS = Endpoint(
    'transaction_status', APIEndpoints.TRANSACTION_STATUS, schemas.TransactionStatusResponse,
    requires_security_credential=True,
)

C2B_REGISTER = Endpoint('c2b_register', APIEndpoints.C2B_REGISTER, schemas.C2BRegisterResponse)
C2B_SIMULATE = Endpoint('c2b_simulate', APIEndpoints.C2B_SIMULATE, schemas.C2BSimulateResponse)

DYNAMIC_QR = Endpoint('dynamic_qr', APIEndpoints.DYNAMIC_QR, schemas.DynamicQRResponse)

EXPRESS_REQUEST = Endpoint('express_request', APIEndpoints.EXPRESS_REQUEST, schemas.ExpressResponse)
EXPRESS_QUERY = Endpoint('express_query', APIEndpoints.EXPRESS_QUERY, schemas.ExpressQueryResponse)

BILL_MANAGER_ONBOARD = Endpoint(
    'bill_manager_onboard', APIEndpoints.BILL_MANAGER_ONBOARD, schemas.OnboardResponse
)
BILL_MANAGER_ONBOARD_MODIFY = Endpoint(
    'bill_manager_onboard_modify', APIEndpoints.BILL_MANAGER_ONBOARD_MODIFY, schemas.BillManagerResponse
)
BILL_MANAGER_SINGLE_INVOICE = Endpoint(
    'bill_manager_single_invoice', APIEndpoints.BILL_MANAGER_SINGLE_INVOICE, schemas.BillManagerResponse
)
BILL_MANAGER_BULK_INVOICE = Endpoint(
    'bill_manager_bulk_invoice', APIEndpoints.BILL_MANAGER_BULK_INVOICE, schemas.BillManagerResponse
)
BILL_MANAGER_CANCEL_INVOICE = Endpoint(
    'bill_manager_cancel_invoice', APIEndpoints.BILL_MANAGER_CANCEL_INVOICE, schemas.BillManagerResponse
)
BILL_MANAGER_RECONCILIATION = Endpoint(
    'bill_manager_reconciliation', APIEndpoints.BILL_MANAGER_RECONCILIATION, schemas.BillManagerResponse
)
