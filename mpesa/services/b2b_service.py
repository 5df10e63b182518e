"""
Business to business (B2B) transfers between short codes.
"""

import logging
from typing import Optional

from .. import endpoints
from ..constants import CommandId, IdentifierType
from ..exceptions import MpesaException
from ..schemas import B2BRequest, B2BResponse
from ..utils.formatters import format_amount
from ..utils.validators import (
    validate_amount, validate_choice, validate_party, validate_required, validate_url
)

logger = logging.getLogger(__name__)


class B2BService:
    """
    Service for B2B transfer operations.
    """

    def __init__(self, client):
        self.client = client

    async def transfer(
        self,
        amount,
        party_a: str,
        party_b: str,
        result_url: str,
        queue_timeout_url: str,
        account_reference: Optional[str] = None,
        remarks: str = "None",
        command_id: CommandId = CommandId.BUSINESS_TO_BUSINESS_TRANSFER,
        sender_identifier_type: IdentifierType = IdentifierType.SHORT_CODE,
        receiver_identifier_type: IdentifierType = IdentifierType.SHORT_CODE,
        requester: Optional[str] = None,
        initiator: Optional[str] = None
    ) -> B2BResponse:
        """
        Transfer money from one business short code to another.

        Args:
            amount: Amount in whole shillings
            party_a: Sending organization short code
            party_b: Receiving organization short code
            result_url: URL receiving the transaction result
            queue_timeout_url: URL notified when the request times out in the queue
            account_reference: Account number for paybill transfers
            remarks: Comments sent along with the transaction
            command_id: Transaction type (default: BusinessToBusinessTransfer)
            sender_identifier_type: Identifier type of party_a
            receiver_identifier_type: Identifier type of party_b
            requester: Optional customer phone number on whose behalf the payment is made
            initiator: Initiator username (default: the client's)

        Returns:
            B2BResponse acknowledging the request

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        sender_type = validate_choice(
            sender_identifier_type, list(IdentifierType), "sender identifier type"
        )
        receiver_type = validate_choice(
            receiver_identifier_type, list(IdentifierType), "receiver identifier type"
        )
        validated = B2BRequest(
            initiator=validate_required(initiator or self.client.initiator_name, "Initiator name"),
            command_id=validate_choice(command_id, list(CommandId), "command id"),
            amount=validate_amount(amount),
            party_a=validate_party(party_a, sender_type),
            sender_identifier_type=sender_type,
            party_b=validate_party(party_b, receiver_type),
            receiver_identifier_type=receiver_type,
            remarks=validate_required(remarks, "Remarks", max_length=100),
            queue_timeout_url=validate_url(queue_timeout_url, "Queue timeout URL"),
            result_url=validate_url(result_url, "Result URL"),
            account_reference=account_reference,
            requester=requester
        )

        logger.info(
            f"Sending B2B transfer of {format_amount(validated.amount)} "
            f"from {validated.party_a} to {validated.party_b}"
        )

        try:
            response = await self.client.send(endpoints.B2B, validated)
        except MpesaException as e:
            logger.error(f"B2B transfer failed: {e}")
            raise

        logger.info(f"B2B transfer accepted. Conversation ID: {response.conversation_id}")
        return response
