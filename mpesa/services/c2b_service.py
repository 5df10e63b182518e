"""
Customer to business (C2B) operations.
Registers confirmation/validation URLs and simulates customer payments.
"""

import logging
from typing import Optional

from .. import endpoints
from ..constants import CommandId, Environment, ResponseType
from ..exceptions import MpesaException, ValidationError
from ..schemas import C2BRegisterRequest, C2BRegisterResponse, C2BSimulateRequest, C2BSimulateResponse
from ..utils.validators import (
    validate_amount, validate_choice, validate_phone_number, validate_short_code, validate_url
)

logger = logging.getLogger(__name__)

C2B_SIMULATE_COMMAND_IDS = (CommandId.CUSTOMER_PAY_BILL_ONLINE, CommandId.CUSTOMER_BUY_GOODS_ONLINE)


class C2BService:
    """
    Service for C2B operations.
    """

    def __init__(self, client):
        self.client = client

    async def register_urls(
        self,
        short_code: str,
        confirmation_url: str,
        validation_url: str,
        response_type: ResponseType = ResponseType.COMPLETED
    ) -> C2BRegisterResponse:
        """
        Register the URLs M-PESA calls for payments made to a short code.

        Args:
            short_code: Organization short code
            confirmation_url: URL receiving payment confirmations
            validation_url: URL asked to validate payments
            response_type: What M-PESA does when validation_url is unreachable

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        validated = C2BRegisterRequest(
            short_code=validate_short_code(short_code),
            response_type=validate_choice(response_type, list(ResponseType), "response type"),
            confirmation_url=validate_url(confirmation_url, "Confirmation URL"),
            validation_url=validate_url(validation_url, "Validation URL")
        )

        logger.info(f"Registering C2B URLs for {validated.short_code}")

        try:
            response = await self.client.send(endpoints.C2B_REGISTER, validated)
        except MpesaException as e:
            logger.error(f"C2B URL registration failed: {e}")
            raise

        logger.info(f"C2B URLs registered: {response.response_description}")
        return response

    async def simulate(
        self,
        short_code: str,
        amount,
        msisdn: str,
        bill_ref_number: Optional[str] = None,
        command_id: CommandId = CommandId.CUSTOMER_PAY_BILL_ONLINE
    ) -> C2BSimulateResponse:
        """
        Simulate a customer paying a short code. Sandbox only.

        Args:
            short_code: Receiving organization short code
            amount: Amount in whole shillings
            msisdn: Paying customer's phone number
            bill_ref_number: Account number for paybill payments
            command_id: CustomerPayBillOnline or CustomerBuyGoodsOnline

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        if self.client.environment is not Environment.SANDBOX:
            raise ValidationError("C2B simulation is only available in the sandbox environment")

        validated = C2BSimulateRequest(
            short_code=validate_short_code(short_code),
            command_id=validate_choice(command_id, C2B_SIMULATE_COMMAND_IDS, "C2B command id"),
            amount=validate_amount(amount),
            msisdn=validate_phone_number(msisdn),
            bill_ref_number=bill_ref_number
        )

        logger.info(f"Simulating C2B payment from {validated.msisdn} to {validated.short_code}")

        try:
            response = await self.client.send(endpoints.C2B_SIMULATE, validated)
        except MpesaException as e:
            logger.error(f"C2B simulation failed: {e}")
            raise

        logger.info(f"C2B simulation accepted: {response.response_description}")
        return response
