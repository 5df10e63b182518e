"""
Dynamic QR code generation.
"""

import logging

from .. import endpoints
from ..constants import TransactionCode
from ..exceptions import MpesaException, ValidationError
from ..schemas import DynamicQRRequest, DynamicQRResponse
from ..utils.validators import validate_amount, validate_choice, validate_required

logger = logging.getLogger(__name__)


class QRService:
    """
    Service for generating M-PESA dynamic QR codes.
    """

    def __init__(self, client):
        self.client = client

    async def generate(
        self,
        merchant_name: str,
        ref_no: str,
        amount,
        trx_code: TransactionCode,
        cpi: str,
        size: int = 300
    ) -> DynamicQRResponse:
        """
        Generate a QR code customers scan to pay.

        Args:
            merchant_name: Name shown to the customer
            ref_no: Transaction reference
            amount: Amount in whole shillings
            trx_code: Transaction type (BG, WA, PB, SM, SB)
            cpi: Credit party identifier (till, paybill, agent or phone number)
            size: Image size in pixels

        Returns:
            DynamicQRResponse carrying the base64 encoded QR image

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        try:
            size = int(size)
        except (TypeError, ValueError):
            raise ValidationError(f"QR size must be a whole number. Got: {size}")
        if size <= 0:
            raise ValidationError(f"QR size must be greater than zero. Got: {size}")

        validated = DynamicQRRequest(
            merchant_name=validate_required(merchant_name, "Merchant name"),
            ref_no=validate_required(ref_no, "Reference number"),
            amount=validate_amount(amount),
            trx_code=validate_choice(trx_code, list(TransactionCode), "transaction code"),
            cpi=validate_required(cpi, "Credit party identifier"),
            size=str(size)
        )

        logger.info(f"Generating dynamic QR for {validated.merchant_name} ({validated.ref_no})")

        try:
            response = await self.client.send(endpoints.DYNAMIC_QR, validated)
        except MpesaException as e:
            logger.error(f"Dynamic QR generation failed: {e}")
            raise

        logger.info(f"Dynamic QR generated: {response.response_description}")
        return response
