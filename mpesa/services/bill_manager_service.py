"""
Bill manager service.
Onboards a short code to M-PESA bill manager and sends, cancels and
reconciles invoices.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from .. import endpoints
from ..constants import SendRemindersType
from ..exceptions import MpesaException, ValidationError
from ..schemas import (
    BillManagerResponse, CancelInvoiceRequest, InvoiceBatch, InvoiceItem,
    InvoiceRequest, OnboardRequest, OnboardResponse, ReconciliationRequest
)
from ..utils.formatters import format_bill_date, format_billed_period
from ..utils.validators import (
    validate_amount, validate_choice, validate_email, validate_phone_number,
    validate_required, validate_short_code, validate_url
)

logger = logging.getLogger(__name__)

# Bulk invoicing accepts at most this many invoices per request
MAX_BULK_INVOICES = 1000


class BillManagerService:
    """
    Service for bill manager operations.
    """

    def __init__(self, client):
        self.client = client

    def _build_onboard_request(
        self,
        short_code: str,
        email: str,
        official_contact: str,
        callback_url: str,
        logo: str,
        send_reminders
    ) -> OnboardRequest:
        email = validate_email(email)
        if not email:
            raise ValidationError("Email is required")

        return OnboardRequest(
            short_code=validate_short_code(short_code),
            email=email,
            official_contact=validate_phone_number(official_contact),
            callback_url=validate_url(callback_url, "Callback URL"),
            logo=validate_required(logo, "Logo"),
            send_reminders=validate_choice(send_reminders, list(SendRemindersType), "send reminders")
        )

    async def onboard(
        self,
        short_code: str,
        email: str,
        official_contact: str,
        callback_url: str,
        logo: str,
        send_reminders: SendRemindersType = SendRemindersType.ENABLE
    ) -> OnboardResponse:
        """
        Opt a short code in to bill manager.

        Args:
            short_code: Paybill number to onboard
            email: Contact email shown on invoices
            official_contact: Contact phone number shown on invoices
            callback_url: URL receiving payment notifications
            logo: Logo image (URL or base64) shown on invoices
            send_reminders: Whether M-PESA sends reminders before due dates

        Returns:
            OnboardResponse with the bill manager app key

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        validated = self._build_onboard_request(
            short_code, email, official_contact, callback_url, logo, send_reminders
        )
        logger.info(f"Onboarding {validated.short_code} to bill manager")
        return await self._send(endpoints.BILL_MANAGER_ONBOARD, validated, "Bill manager onboarding")

    async def modify_onboarding(
        self,
        short_code: str,
        email: str,
        official_contact: str,
        callback_url: str,
        logo: str,
        send_reminders: SendRemindersType = SendRemindersType.ENABLE
    ) -> BillManagerResponse:
        """
        Change the opt-in details of an onboarded short code.

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        validated = self._build_onboard_request(
            short_code, email, official_contact, callback_url, logo, send_reminders
        )
        logger.info(f"Updating bill manager details for {validated.short_code}")
        return await self._send(
            endpoints.BILL_MANAGER_ONBOARD_MODIFY, validated, "Bill manager onboarding update"
        )

    def build_invoice(
        self,
        amount,
        account_reference: str,
        billed_full_name: str,
        billed_period,
        billed_phone_number: str,
        due_date,
        external_reference: str,
        invoice_name: str,
        invoice_items: Optional[Iterable[Dict[str, Any]]] = None
    ) -> InvoiceRequest:
        """
        Validate invoice fields and build an invoice.

        Args:
            amount: Total invoice amount in whole shillings
            account_reference: Customer's account number at the business
            billed_full_name: Customer's name
            billed_period: Period billed, e.g. "August 2024" or a date
            billed_phone_number: Customer's phone number
            due_date: Due date as a date, datetime or preformatted string
            external_reference: Unique invoice reference
            invoice_name: Invoice title
            invoice_items: Optional line items as ``{"item_name": ..., "amount": ...}``

        Raises:
            ValidationError: If input validation fails
        """
        items = None
        if invoice_items:
            items = [
                InvoiceItem(
                    item_name=validate_required(item.get('item_name'), "Invoice item name"),
                    amount=validate_amount(item.get('amount'))
                )
                for item in invoice_items
            ]

        return InvoiceRequest(
            amount=validate_amount(amount),
            account_reference=validate_required(account_reference, "Account reference"),
            billed_full_name=validate_required(billed_full_name, "Billed full name"),
            billed_period=validate_required(format_billed_period(billed_period), "Billed period"),
            billed_phone_number=validate_phone_number(billed_phone_number),
            due_date=validate_required(format_bill_date(due_date), "Due date"),
            external_reference=validate_required(external_reference, "External reference"),
            invoice_items=items,
            invoice_name=validate_required(invoice_name, "Invoice name")
        )

    async def send_single_invoice(self, **invoice) -> BillManagerResponse:
        """
        Send one invoice. Takes the keyword arguments of ``build_invoice``.

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        validated = self.build_invoice(**invoice)
        logger.info(f"Sending invoice {validated.external_reference}")
        return await self._send(endpoints.BILL_MANAGER_SINGLE_INVOICE, validated, "Single invoicing")

    async def send_bulk_invoices(self, invoices: List[Dict[str, Any]]) -> BillManagerResponse:
        """
        Send several invoices in one request.

        Args:
            invoices: List of keyword argument dicts for ``build_invoice``

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        if not invoices:
            raise ValidationError("At least one invoice is required")
        if len(invoices) > MAX_BULK_INVOICES:
            raise ValidationError(
                f"Too many invoices. Maximum {MAX_BULK_INVOICES} per request. Got: {len(invoices)}"
            )

        batch = InvoiceBatch([self.build_invoice(**invoice) for invoice in invoices])
        logger.info(f"Sending {len(batch.root)} invoices")
        return await self._send(endpoints.BILL_MANAGER_BULK_INVOICE, batch, "Bulk invoicing")

    async def cancel_invoice(self, external_reference: str) -> BillManagerResponse:
        """
        Cancel an invoice that has not been paid.

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        validated = CancelInvoiceRequest(
            external_reference=validate_required(external_reference, "External reference")
        )
        logger.info(f"Cancelling invoice {validated.external_reference}")
        return await self._send(endpoints.BILL_MANAGER_CANCEL_INVOICE, validated, "Invoice cancellation")

    async def reconcile(
        self,
        account_reference: str,
        external_reference: str,
        full_name: str,
        invoice_name: str,
        paid_amount,
        payment_date,
        phone_number: str,
        transaction_id: str
    ) -> BillManagerResponse:
        """
        Acknowledge a payment notification received on the bill manager callback URL.

        Raises:
            ValidationError: If input validation fails
            MpesaException: If the request fails
        """
        validated = ReconciliationRequest(
            account_reference=validate_required(account_reference, "Account reference"),
            external_reference=validate_required(external_reference, "External reference"),
            full_name=validate_required(full_name, "Full name"),
            invoice_name=validate_required(invoice_name, "Invoice name"),
            paid_amount=validate_amount(paid_amount),
            payment_date=validate_required(format_bill_date(payment_date), "Payment date"),
            phone_number=validate_phone_number(phone_number),
            transaction_id=validate_required(transaction_id, "Transaction ID")
        )
        logger.info(f"Reconciling payment {validated.transaction_id} for {validated.external_reference}")
        return await self._send(endpoints.BILL_MANAGER_RECONCILIATION, validated, "Reconciliation")

    async def _send(self, endpoint, payload, operation: str):
        try:
            response = await self.client.send(endpoint, payload)
        except MpesaException as e:
            logger.error(f"{operation} failed: {e}")
            raise

        logger.info(f"{operation} response: {response.res_code} {response.res_msg}")
        return response
