"""
Request and response schemas for M-PESA API operations.

Field aliases are the provider's wire names, including its misspellings
(``RecieverIdentifierType``, ``OriginatorCoversationID``).
"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, RootModel

from .constants import CommandId, IdentifierType, ResponseType, SendRemindersType, TransactionCode


class MpesaRequest(BaseModel):
    """Base for request bodies; validated by the services before construction."""
    model_config = ConfigDict(populate_by_name=True)


class MpesaResponse(BaseModel):
    """Base for response bodies. Unknown fields are kept as extras."""
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, extra='allow')


# Requests

class InitiatorRequest(MpesaRequest):
    """Requests authenticated by an initiator's encrypted password."""
    security_credential: Optional[str] = Field(default=None, alias='SecurityCredential')


class AccountBalanceRequest(InitiatorRequest):
    initiator: str = Field(alias='Initiator')
    command_id: CommandId = Field(default=CommandId.ACCOUNT_BALANCE, alias='CommandID')
    party_a: str = Field(alias='PartyA')
    identifier_type: IdentifierType = Field(default=IdentifierType.SHORT_CODE, alias='IdentifierType')
    remarks: str = Field(alias='Remarks')
    queue_timeout_url: str = Field(alias='QueueTimeOutURL')
    result_url: str = Field(alias='ResultURL')


class B2BRequest(InitiatorRequest):
    initiator: str = Field(alias='Initiator')
    command_id: CommandId = Field(default=CommandId.BUSINESS_TO_BUSINESS_TRANSFER, alias='CommandID')
    amount: int = Field(alias='Amount')
    party_a: str = Field(alias='PartyA')
    sender_identifier_type: IdentifierType = Field(
        default=IdentifierType.SHORT_CODE, alias='SenderIdentifierType'
    )
    party_b: str = Field(alias='PartyB')
    receiver_identifier_type: IdentifierType = Field(
        default=IdentifierType.SHORT_CODE, alias='RecieverIdentifierType'
    )
    remarks: str = Field(alias='Remarks')
    queue_timeout_url: str = Field(alias='QueueTimeOutURL')
    result_url: str = Field(alias='ResultURL')
    account_reference: Optional[str] = Field(default=None, alias='AccountReference')
    requester: Optional[str] = Field(default=None, alias='Requester')


class B2CRequest(InitiatorRequest):
    initiator_name: str = Field(alias='InitiatorName')
    command_id: CommandId = Field(default=CommandId.BUSINESS_PAYMENT, alias='CommandID')
    amount: int = Field(alias='Amount')
    party_a: str = Field(alias='PartyA')
    party_b: str = Field(alias='PartyB')
    remarks: str = Field(alias='Remarks')
    queue_timeout_url: str = Field(alias='QueueTimeOutURL')
    result_url: str = Field(alias='ResultURL')
    occasion: Optional[str] = Field(default=None, alias='Occasion')


class TransactionReversalRequest(InitiatorRequest):
    initiator: str = Field(alias='Initiator')
    command_id: CommandId = Field(default=CommandId.TRANSACTION_REVERSAL, alias='CommandID')
    transaction_id: str = Field(alias='TransactionID')
    amount: int = Field(alias='Amount')
    receiver_party: str = Field(alias='ReceiverParty')
    receiver_identifier_type: IdentifierType = Field(
        default=IdentifierType.SHORT_CODE, alias='RecieverIdentifierType'
    )
    result_url: str = Field(alias='ResultURL')
    queue_timeout_url: str = Field(alias='QueueTimeOutURL')
    remarks: str = Field(alias='Remarks')
    occasion: Optional[str] = Field(default=None, alias='Occasion')


class TransactionStatusRequest(InitiatorRequest):
    initiator: str = Field(alias='Initiator')
    command_id: CommandId = Field(default=CommandId.TRANSACTION_STATUS_QUERY, alias='CommandID')
    transaction_id: str = Field(alias='TransactionID')
    party_a: str = Field(alias='PartyA')
    identifier_type: IdentifierType = Field(default=IdentifierType.SHORT_CODE, alias='IdentifierType')
    result_url: str = Field(alias='ResultURL')
    queue_timeout_url: str = Field(alias='QueueTimeOutURL')
    remarks: str = Field(alias='Remarks')
    occasion: Optional[str] = Field(default=None, alias='Occasion')


class C2BRegisterRequest(MpesaRequest):
    short_code: str = Field(alias='ShortCode')
    response_type: ResponseType = Field(default=ResponseType.COMPLETED, alias='ResponseType')
    confirmation_url: str = Field(alias='ConfirmationURL')
    validation_url: str = Field(alias='ValidationURL')


class C2BSimulateRequest(MpesaRequest):
    short_code: str = Field(alias='ShortCode')
    command_id: CommandId = Field(default=CommandId.CUSTOMER_PAY_BILL_ONLINE, alias='CommandID')
    amount: int = Field(alias='Amount')
    msisdn: str = Field(alias='Msisdn')
    bill_ref_number: Optional[str] = Field(default=None, alias='BillRefNumber')


class DynamicQRRequest(MpesaRequest):
    merchant_name: str = Field(alias='MerchantName')
    ref_no: str = Field(alias='RefNo')
    amount: int = Field(alias='Amount')
    trx_code: TransactionCode = Field(alias='TrxCode')
    cpi: str = Field(alias='CPI')
    size: str = Field(alias='Size')


class ExpressRequest(MpesaRequest):
    business_short_code: str = Field(alias='BusinessShortCode')
    password: str = Field(alias='Password')
    timestamp: str = Field(alias='Timestamp')
    transaction_type: CommandId = Field(alias='TransactionType')
    amount: int = Field(alias='Amount')
    party_a: str = Field(alias='PartyA')
    party_b: str = Field(alias='PartyB')
    phone_number: str = Field(alias='PhoneNumber')
    callback_url: str = Field(alias='CallBackURL')
    account_reference: str = Field(alias='AccountReference')
    transaction_desc: Optional[str] = Field(default=None, alias='TransactionDesc')


class ExpressQueryRequest(MpesaRequest):
    business_short_code: str = Field(alias='BusinessShortCode')
    password: str = Field(alias='Password')
    timestamp: str = Field(alias='Timestamp')
    checkout_request_id: str = Field(alias='CheckoutRequestID')


class OnboardRequest(MpesaRequest):
    callback_url: str = Field(alias='callbackurl')
    email: str = Field(alias='email')
    logo: str = Field(alias='logo')
    official_contact: str = Field(alias='officialContact')
    send_reminders: SendRemindersType = Field(alias='sendReminders')
    short_code: str = Field(alias='shortcode')


class InvoiceItem(MpesaRequest):
    item_name: str = Field(alias='itemName')
    amount: int = Field(alias='amount')


class InvoiceRequest(MpesaRequest):
    amount: int = Field(alias='amount')
    account_reference: str = Field(alias='accountReference')
    billed_full_name: str = Field(alias='billedFullName')
    billed_period: str = Field(alias='billedPeriod')
    billed_phone_number: str = Field(alias='billedPhoneNumber')
    due_date: str = Field(alias='dueDate')
    external_reference: str = Field(alias='externalReference')
    invoice_items: Optional[List[InvoiceItem]] = Field(default=None, alias='invoiceItems')
    invoice_name: str = Field(alias='invoiceName')


class InvoiceBatch(RootModel[List[InvoiceRequest]]):
    """Bulk invoicing takes a bare JSON array of invoices."""


class CancelInvoiceRequest(MpesaRequest):
    external_reference: str = Field(alias='externalReference')


class ReconciliationRequest(MpesaRequest):
    account_reference: str = Field(alias='accountReference')
    external_reference: str = Field(alias='externalReference')
    full_name: str = Field(alias='fullName')
    invoice_name: str = Field(alias='invoiceName')
    paid_amount: int = Field(alias='paidAmount')
    payment_date: str = Field(alias='paymentDate')
    phone_number: str = Field(alias='phoneNumber')
    transaction_id: str = Field(alias='transactionId')


# Responses

class ConversationResponse(MpesaResponse):
    """Acknowledgement of an asynchronous initiator request; results go to ResultURL."""
    conversation_id: str = Field(alias='ConversationID')
    originator_conversation_id: str = Field(alias='OriginatorConversationID')
    response_code: str = Field(alias='ResponseCode')
    response_description: str = Field(alias='ResponseDescription')


class AccountBalanceResponse(ConversationResponse):
    pass


class B2BResponse(ConversationResponse):
    pass


class B2CResponse(ConversationResponse):
    pass


class TransactionReversalResponse(ConversationResponse):
    pass


class TransactionStatusResponse(ConversationResponse):
    pass


class C2BRegisterResponse(MpesaResponse):
    originator_conversation_id: str = Field(
        validation_alias=AliasChoices('OriginatorCoversationID', 'OriginatorConversationID')
    )
    response_code: str = Field(alias='ResponseCode')
    response_description: str = Field(alias='ResponseDescription')


class C2BSimulateResponse(MpesaResponse):
    conversation_id: Optional[str] = Field(default=None, alias='ConversationID')
    originator_conversation_id: str = Field(
        validation_alias=AliasChoices('OriginatorCoversationID', 'OriginatorConversationID')
    )
    response_code: Optional[str] = Field(default=None, alias='ResponseCode')
    response_description: str = Field(alias='ResponseDescription')


class DynamicQRResponse(MpesaResponse):
    qr_code: str = Field(alias='QRCode')
    response_code: str = Field(alias='ResponseCode')
    response_description: str = Field(alias='ResponseDescription')
    request_id: Optional[str] = Field(default=None, alias='RequestID')


class ExpressResponse(MpesaResponse):
    merchant_request_id: str = Field(alias='MerchantRequestID')
    checkout_request_id: str = Field(alias='CheckoutRequestID')
    response_code: str = Field(alias='ResponseCode')
    response_description: str = Field(alias='ResponseDescription')
    customer_message: str = Field(alias='CustomerMessage')


class ExpressQueryResponse(MpesaResponse):
    merchant_request_id: str = Field(alias='MerchantRequestID')
    checkout_request_id: str = Field(alias='CheckoutRequestID')
    response_code: str = Field(alias='ResponseCode')
    response_description: str = Field(alias='ResponseDescription')
    result_code: str = Field(alias='ResultCode')
    result_desc: str = Field(alias='ResultDesc')


class BillManagerResponse(MpesaResponse):
    res_code: str = Field(alias='rescode')
    res_msg: str = Field(alias='resmsg')


class OnboardResponse(BillManagerResponse):
    app_key: Optional[str] = Field(default=None, alias='app_key')
