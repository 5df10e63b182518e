"""
M-PESA Express (Lipa na M-PESA Online / STK push) service.
Prompts a customer's phone to authorize a payment.
"""

import logging
from datetime import datetime
from typing import Optional

from .. import endpoints
from ..constants import CommandId, DEFAULT_PASSKEY, EXPRESS_TRANSACTION_TYPES
from ..exceptions import MpesaException
from ..schemas import ExpressQueryRequest, ExpressQueryResponse, ExpressRequest, ExpressResponse
from ..utils.formatters import encode_express_password, format_amount, format_timestamp
from ..utils.validators import (
    validate_amount, validate_choice, validate_phone_number,
    validate_required, validate_short_code, validate_url
)

logger = logging.getLogger(__name__)


class ExpressService:
    """
    Service for STK push requests and their status queries.
    """

    def __init__(self, client):
        self.client = client

    def _pass_key(self) -> str:
        pass_key = self.client.pass_key
        return pass_key.get_secret_value() if pass_key is not None else DEFAULT_PASSKEY

    def build_password(self, business_short_code: str, timestamp: str) -> str:
        """Password for a request made by ``business_short_code`` at ``timestamp``."""
        return encode_express_password(business_short_code, self._pass_key(), timestamp)

    async def stk_push(
        self,
        business_short_code: str,
        amount,
        phone_number: str,
        callback_url: str,
        account_reference: str,
        party_a: Optional[str] = None,
        party_b: Optional[str] = None,
        transaction_type: CommandId = CommandId.CUSTOMER_PAY_BILL_ONLINE,
        transaction_desc: Optional[str] = None,
        timestamp: Optional[datetime] = None
    ) -> ExpressResponse:
        """
        Initiate an STK push payment request.

        Args:
            business_short_code: Paybill or till receiving the payment
            amount: Amount in whole shillings
            phone_number: Phone number receiving the PIN prompt
            callback_url: URL receiving the payment result
            account_reference: Identifier shown to the customer (max 12 characters)
            party_a: Paying phone number (default: phone_number)
            party_b: Receiving organization (default: business_short_code)
            transaction_type: CustomerPayBillOnline or CustomerBuyGoodsOnline
            transaction_desc: Optional description (max 13 characters)
            timestamp: Request time (default: now)

        Returns:
            ExpressResponse with the CheckoutRequestID to query later

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        short_code = validate_short_code(business_short_code)
        phone = validate_phone_number(phone_number)
        sent_at = format_timestamp(timestamp)

        validated = ExpressRequest(
            business_short_code=short_code,
            password=self.build_password(short_code, sent_at),
            timestamp=sent_at,
            transaction_type=validate_choice(
                transaction_type, EXPRESS_TRANSACTION_TYPES, "express transaction type"
            ),
            amount=validate_amount(amount),
            party_a=validate_phone_number(party_a) if party_a else phone,
            party_b=validate_short_code(party_b) if party_b else short_code,
            phone_number=phone,
            callback_url=validate_url(callback_url, "Callback URL"),
            account_reference=validate_required(account_reference, "Account reference", max_length=12),
            transaction_desc=(
                validate_required(transaction_desc, "Transaction description", max_length=13)
                if transaction_desc else None
            )
        )

        logger.info(
            f"Sending STK push of {format_amount(validated.amount)} to {validated.phone_number} "
            f"for {validated.account_reference}"
        )

        try:
            response = await self.client.send(endpoints.EXPRESS_REQUEST, validated)
        except MpesaException as e:
            logger.error(f"STK push failed: {e}")
            raise

        logger.info(f"STK push accepted. Checkout request ID: {response.checkout_request_id}")
        return response

    async def query(
        self,
        business_short_code: str,
        checkout_request_id: str,
        timestamp: Optional[datetime] = None
    ) -> ExpressQueryResponse:
        """
        Query the result of an STK push request.

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        short_code = validate_short_code(business_short_code)
        sent_at = format_timestamp(timestamp)

        validated = ExpressQueryRequest(
            business_short_code=short_code,
            password=self.build_password(short_code, sent_at),
            timestamp=sent_at,
            checkout_request_id=validate_required(checkout_request_id, "Checkout request ID")
        )

        logger.info(f"Querying STK push status for {validated.checkout_request_id}")

        try:
            response = await self.client.send(endpoints.EXPRESS_QUERY, validated)
        except MpesaException as e:
            logger.error(f"STK push query failed: {e}")
            raise

        logger.info(f"STK push {validated.checkout_request_id} result: {response.result_desc}")
        return response
