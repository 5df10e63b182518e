"""
Transaction reversal and status queries.
"""

import logging
from typing import Optional

from .. import endpoints
from ..constants import IdentifierType
from ..exceptions import MpesaException
from ..schemas import (
    TransactionReversalRequest, TransactionReversalResponse,
    TransactionStatusRequest, TransactionStatusResponse
)
from ..utils.validators import (
    validate_amount, validate_choice, validate_party, validate_required, validate_url
)

logger = logging.getLogger(__name__)


class TransactionService:
    """
    Service for operations on completed transactions.
    """

    def __init__(self, client):
        self.client = client

    async def reverse(
        self,
        transaction_id: str,
        amount,
        receiver_party: str,
        result_url: str,
        queue_timeout_url: str,
        receiver_identifier_type: IdentifierType = IdentifierType.SHORT_CODE,
        remarks: str = "None",
        occasion: Optional[str] = None,
        initiator: Optional[str] = None
    ) -> TransactionReversalResponse:
        """
        Reverse an M-PESA transaction.

        Args:
            transaction_id: M-PESA receipt number of the transaction to reverse
            amount: Amount to reverse, in whole shillings
            receiver_party: Short code that received the transaction
            result_url: URL receiving the reversal result
            queue_timeout_url: URL notified when the request times out in the queue
            receiver_identifier_type: Identifier type of receiver_party
            remarks: Comments sent along with the request
            occasion: Optional extra information
            initiator: Initiator username (default: the client's)

        Returns:
            TransactionReversalResponse acknowledging the request

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        receiver_type = validate_choice(
            receiver_identifier_type, list(IdentifierType), "receiver identifier type"
        )
        validated = TransactionReversalRequest(
            initiator=validate_required(initiator or self.client.initiator_name, "Initiator name"),
            transaction_id=validate_required(transaction_id, "Transaction ID", max_length=20),
            amount=validate_amount(amount),
            receiver_party=validate_party(receiver_party, receiver_type),
            receiver_identifier_type=receiver_type,
            result_url=validate_url(result_url, "Result URL"),
            queue_timeout_url=validate_url(queue_timeout_url, "Queue timeout URL"),
            remarks=validate_required(remarks, "Remarks", max_length=100),
            occasion=occasion
        )

        logger.info(f"Requesting reversal of transaction {validated.transaction_id}")

        try:
            response = await self.client.send(endpoints.TRANSACTION_REVERSAL, validated)
        except MpesaException as e:
            logger.error(f"Transaction reversal failed: {e}")
            raise

        logger.info(f"Reversal request accepted. Conversation ID: {response.conversation_id}")
        return response

    async def query_status(
        self,
        transaction_id: str,
        party_a: str,
        result_url: str,
        queue_timeout_url: str,
        identifier_type: IdentifierType = IdentifierType.SHORT_CODE,
        remarks: str = "None",
        occasion: Optional[str] = None,
        initiator: Optional[str] = None
    ) -> TransactionStatusResponse:
        """
        Query the status of an M-PESA transaction.
        The status itself is posted to ``result_url``.

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        party_type = validate_choice(identifier_type, list(IdentifierType), "identifier type")
        validated = TransactionStatusRequest(
            initiator=validate_required(initiator or self.client.initiator_name, "Initiator name"),
            transaction_id=validate_required(transaction_id, "Transaction ID", max_length=20),
            party_a=validate_party(party_a, party_type),
            identifier_type=party_type,
            result_url=validate_url(result_url, "Result URL"),
            queue_timeout_url=validate_url(queue_timeout_url, "Queue timeout URL"),
            remarks=validate_required(remarks, "Remarks", max_length=100),
            occasion=occasion
        )

        logger.info(f"Querying status of transaction {validated.transaction_id}")

        try:
            response = await self.client.send(endpoints.TRANSACTION_STATUS, validated)
        except MpesaException as e:
            logger.error(f"Transaction status query failed: {e}")
            raise

        logger.info(f"Status query accepted. Conversation ID: {response.conversation_id}")
        return response
