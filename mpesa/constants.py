"""
Constants and enums for M-PESA API operations.
"""

from enum import Enum, IntEnum
from importlib import resources
from typing import Optional


class Environment(str, Enum):
    """M-PESA API environments."""
    SANDBOX = "sandbox"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value):
        """
        Parse an environment name, ignoring case and surrounding whitespace.

        Raises:
            ValueError: If the name is not a known environment
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ', '.join(e.value for e in cls)
            raise ValueError(f"Unknown M-PESA environment: {value!r}. Expected one of: {valid}")

    @property
    def base_url(self) -> str:
        """Base URL of the Daraja API for this environment."""
        return BASE_URLS[self]

    @property
    def certificate(self) -> Optional[bytes]:
        """
        PEM encoded public certificate used to encrypt initiator passwords,
        read from ``mpesa/certificates/<environment>.cer``. None when the
        package ships no certificate for this environment.
        """
        path = resources.files('mpesa').joinpath('certificates').joinpath(f'{self.value}.cer')
        if not path.is_file():
            return None
        return path.read_bytes()


BASE_URLS = {
    Environment.SANDBOX: "https://sandbox.safaricom.co.ke",
    Environment.PRODUCTION: "https://api.safaricom.co.ke",
}


class CommandId(str, Enum):
    """Transaction command identifiers understood by M-PESA."""
    TRANSACTION_REVERSAL = "TransactionReversal"
    SALARY_PAYMENT = "SalaryPayment"
    BUSINESS_PAYMENT = "BusinessPayment"
    PROMOTION_PAYMENT = "PromotionPayment"
    ACCOUNT_BALANCE = "AccountBalance"
    CUSTOMER_PAY_BILL_ONLINE = "CustomerPayBillOnline"
    CUSTOMER_BUY_GOODS_ONLINE = "CustomerBuyGoodsOnline"
    TRANSACTION_STATUS_QUERY = "TransactionStatusQuery"
    CHECK_IDENTITY = "CheckIdentity"
    BUSINESS_PAY_BILL = "BusinessPayBill"
    BUSINESS_BUY_GOODS = "BusinessBuyGoods"
    DISBURSE_FUNDS_TO_BUSINESS = "DisburseFundsToBusiness"
    BUSINESS_TO_BUSINESS_TRANSFER = "BusinessToBusinessTransfer"
    BUSINESS_TRANSFER_FROM_MMF_TO_UTILITY = "BusinessTransferFromMMFToUtility"


B2C_COMMAND_IDS = (
    CommandId.SALARY_PAYMENT,
    CommandId.BUSINESS_PAYMENT,
    CommandId.PROMOTION_PAYMENT,
)

EXPRESS_TRANSACTION_TYPES = (
    CommandId.CUSTOMER_PAY_BILL_ONLINE,
    CommandId.CUSTOMER_BUY_GOODS_ONLINE,
)


class IdentifierType(IntEnum):
    """Type of organization or party receiving/sending a transaction."""
    MSISDN = 1
    TILL_NUMBER = 2
    SHORT_CODE = 4


class ResponseType(str, Enum):
    """Action taken by M-PESA when a C2B validation URL is unreachable."""
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class SendRemindersType(IntEnum):
    """Whether bill manager sends invoice reminders."""
    DISABLE = 0
    ENABLE = 1


class TransactionCode(str, Enum):
    """Dynamic QR transaction types."""
    BUY_GOODS = "BG"
    WITHDRAW_AGENT = "WA"
    PAY_BILL = "PB"
    SEND_MONEY = "SM"
    SEND_TO_BUSINESS = "SB"


# API Endpoints
class APIEndpoints:
    """Daraja API endpoint paths, relative to the environment base URL."""
    GENERATE_TOKEN = "/oauth/v1/generate"

    # Initiator endpoints (require a security credential)
    ACCOUNT_BALANCE = "/mpesa/accountbalance/v1/query"
    B2B = "/mpesa/b2b/v1/paymentrequest"
    B2C = "/mpesa/b2c/v1/paymentrequest"
    TRANSACTION_REVERSAL = "/mpesa/reversal/v1/request"
    TRANSACTION_STATUS = "/mpesa/transactionstatus/v1/query"

    # Customer to business
    C2B_REGISTER = "/mpesa/c2b/v1/registerurl"
    C2B_SIMULATE = "/mpesa/c2b/v1/simulate"

    # Dynamic QR
    DYNAMIC_QR = "/mpesa/qrcode/v1/generate"

    # M-PESA Express
    EXPRESS_REQUEST = "/mpesa/stkpush/v1/processrequest"
    EXPRESS_QUERY = "/mpesa/stkpushquery/v1/query"

    # Bill manager
    BILL_MANAGER_ONBOARD = "/v1/billmanager-invoice/optin"
    BILL_MANAGER_ONBOARD_MODIFY = "/v1/billmanager-invoice/change-optin-details"
    BILL_MANAGER_SINGLE_INVOICE = "/v1/billmanager-invoice/single-invoicing"
    BILL_MANAGER_BULK_INVOICE = "/v1/billmanager-invoice/bulk-invoicing"
    BILL_MANAGER_CANCEL_INVOICE = "/v1/billmanager-invoice/cancel-single-invoice"
    BILL_MANAGER_RECONCILIATION = "/v1/billmanager-invoice/reconciliation"


# Token settings
TOKEN_GRANT_TYPE = "client_credentials"
DEFAULT_TOKEN_EXPIRY_MARGIN_SECONDS = 60  # Refresh a minute before expiry

# Publicly documented sandbox test values
DEFAULT_PASSKEY = "bfb279f9aa9bdbcf158e97dd71a467cd2e0c893059b10f78e6b72ada1ed2c919"
DEFAULT_SANDBOX_INITIATOR_PASSWORD = "Safcom496!"

# Phone number settings
KENYA_COUNTRY_CODE = "254"
PHONE_NUMBER_LENGTH = 12  # Including country code (2547XXXXXXXX)

# Express timestamps are sent as YYYYMMDDHHMMSS
EXPRESS_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
BILL_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Default settings
DEFAULT_ENVIRONMENT = Environment.SANDBOX
DEFAULT_TIMEOUT = 30  # seconds
