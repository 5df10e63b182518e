"""
Account service for M-PESA account operations.
Handles account balance queries.
"""

import logging
from typing import Optional

from .. import endpoints
from ..constants import IdentifierType
from ..exceptions import MpesaException
from ..schemas import AccountBalanceRequest, AccountBalanceResponse
from ..utils.validators import (
    validate_choice, validate_party, validate_required, validate_url
)

logger = logging.getLogger(__name__)


class AccountService:
    """
    Service for account-related operations.
    """

    def __init__(self, client):
        self.client = client

    async def get_balance(
        self,
        party_a: str,
        result_url: str,
        queue_timeout_url: str,
        identifier_type: IdentifierType = IdentifierType.SHORT_CODE,
        remarks: str = "None",
        initiator: Optional[str] = None
    ) -> AccountBalanceResponse:
        """
        Request the balance of a short code.

        The balance itself is posted to ``result_url``; the response only
        acknowledges the request.

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        party_type = validate_choice(identifier_type, list(IdentifierType), "identifier type")
        validated = AccountBalanceRequest(
            initiator=validate_required(initiator or self.client.initiator_name, "Initiator name"),
            party_a=validate_party(party_a, party_type),
            identifier_type=party_type,
            remarks=validate_required(remarks, "Remarks", max_length=100),
            queue_timeout_url=validate_url(queue_timeout_url, "Queue timeout URL"),
            result_url=validate_url(result_url, "Result URL")
        )

        logger.info(f"Requesting account balance for {validated.party_a}")

        try:
            response = await self.client.send(endpoints.ACCOUNT_BALANCE, validated)
        except MpesaException as e:
            logger.error(f"Failed to request account balance: {e}")
            raise

        logger.info(f"Account balance request accepted. Conversation ID: {response.conversation_id}")
        return response
