"""
Business to customer (B2C) payouts.
Sends money from a business short code to a customer's M-PESA wallet.
"""

import logging
from typing import Optional

from .. import endpoints
from ..constants import B2C_COMMAND_IDS, CommandId
from ..exceptions import MpesaException
from ..schemas import B2CRequest, B2CResponse
from ..utils.formatters import format_amount
from ..utils.validators import (
    validate_amount, validate_choice, validate_phone_number,
    validate_required, validate_short_code, validate_url
)

logger = logging.getLogger(__name__)


class B2CService:
    """
    Service for B2C payment operations.
    """

    def __init__(self, client):
        self.client = client

    async def send_payment(
        self,
        amount,
        party_a: str,
        party_b: str,
        result_url: str,
        queue_timeout_url: str,
        remarks: str = "None",
        command_id: CommandId = CommandId.BUSINESS_PAYMENT,
        occasion: Optional[str] = None,
        initiator_name: Optional[str] = None
    ) -> B2CResponse:
        """
        Pay a customer from a business short code.

        Args:
            amount: Amount in whole shillings
            party_a: Paying business short code
            party_b: Receiving customer phone number
            result_url: URL receiving the transaction result
            queue_timeout_url: URL notified when the request times out in the queue
            remarks: Comments sent along with the transaction
            command_id: SalaryPayment, BusinessPayment or PromotionPayment
            occasion: Optional extra information
            initiator_name: Initiator username (default: the client's)

        Returns:
            B2CResponse acknowledging the request

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        initiator_name = initiator_name or self.client.initiator_name
        validated = B2CRequest(
            initiator_name=validate_required(initiator_name, "Initiator name"),
            command_id=validate_choice(command_id, B2C_COMMAND_IDS, "B2C command id"),
            amount=validate_amount(amount),
            party_a=validate_short_code(party_a),
            party_b=validate_phone_number(party_b),
            remarks=validate_required(remarks, "Remarks", max_length=100),
            queue_timeout_url=validate_url(queue_timeout_url, "Queue timeout URL"),
            result_url=validate_url(result_url, "Result URL"),
            occasion=occasion
        )

        logger.info(f"Sending B2C payment of {format_amount(validated.amount)} to {validated.party_b}")

        try:
            response = await self.client.send(endpoints.B2C, validated)
        except MpesaException as e:
            logger.error(f"B2C payment failed: {e}")
            raise

        logger.info(f"B2C payment accepted. Conversation ID: {response.conversation_id}")
        return response
