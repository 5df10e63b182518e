"""Tests for the endpoint services: validation and request bodies."""

import base64
from datetime import date, datetime

import pytest

from mpesa.constants import (
    CommandId, DEFAULT_PASSKEY, Environment, IdentifierType, SendRemindersType, TransactionCode
)
from mpesa.exceptions import InvalidAmountError, InvalidPhoneNumberError, InvalidURLError, ValidationError
from mpesa.services.bill_manager_service import MAX_BULK_INVOICES

from .conftest import respond

RESULT_URL = 'https://example.com/result'
TIMEOUT_URL = 'https://example.com/timeout'

ACCEPTED = {
    'ConversationID': 'AG_20240118_00004e0dd6a4d1d4b30e',
    'OriginatorConversationID': '12345-67890-1',
    'ResponseCode': '0',
    'ResponseDescription': 'Accept the service request successfully.',
}
BILL_OK = {'rescode': '200', 'resmsg': 'Success'}


def invoice(**overrides):
    data = {
        'amount': 800,
        'account_reference': 'A1',
        'billed_full_name': 'John Doe',
        'billed_period': date(2024, 8, 1),
        'billed_phone_number': '0722000000',
        'due_date': date(2024, 9, 15),
        'external_reference': 'INV-1',
        'invoice_name': 'Rent',
    }
    data.update(overrides)
    return data


class TestB2C:

    @pytest.mark.asyncio
    async def test_send_payment_body(self, daraja, mpesa):
        daraja.route('/mpesa/b2c/v1/paymentrequest', respond(200, ACCEPTED))

        response = await mpesa.b2c.send_payment(
            amount='1000',
            party_a='600000',
            party_b='0708374149',
            result_url=RESULT_URL,
            queue_timeout_url=TIMEOUT_URL,
            remarks='Salary',
            command_id='SalaryPayment',
        )

        body = daraja.json_sent_to('/mpesa/b2c/v1/paymentrequest')
        assert body['InitiatorName'] == 'testapi'
        assert body['CommandID'] == 'SalaryPayment'
        assert body['Amount'] == 1000
        assert body['PartyA'] == '600000'
        assert body['PartyB'] == '254708374149'
        assert body['QueueTimeOutURL'] == TIMEOUT_URL
        assert body['ResultURL'] == RESULT_URL
        assert body['SecurityCredential']
        assert 'Occasion' not in body
        assert response.originator_conversation_id == '12345-67890-1'

    @pytest.mark.parametrize('amount', [0, -5, '12.5', 'ten', None])
    @pytest.mark.asyncio
    async def test_invalid_amount_sends_nothing(self, daraja, mpesa, amount):
        with pytest.raises(InvalidAmountError):
            await mpesa.b2c.send_payment(amount, '600000', '254708374149', RESULT_URL, TIMEOUT_URL)

        assert daraja.requests == []

    @pytest.mark.asyncio
    async def test_rejects_non_b2c_command(self, daraja, mpesa):
        with pytest.raises(ValidationError):
            await mpesa.b2c.send_payment(
                10, '600000', '254708374149', RESULT_URL, TIMEOUT_URL,
                command_id=CommandId.BUSINESS_BUY_GOODS,
            )
        assert daraja.requests == []

    @pytest.mark.asyncio
    async def test_requires_initiator_name(self, daraja, build_client):
        client = build_client(initiator_name=None)

        with pytest.raises(ValidationError):
            await client.b2c.send_payment(10, '600000', '254708374149', RESULT_URL, TIMEOUT_URL)
        assert daraja.requests == []


class TestB2B:

    @pytest.mark.asyncio
    async def test_transfer_body(self, daraja, mpesa):
        daraja.route('/mpesa/b2b/v1/paymentrequest', respond(200, ACCEPTED))

        await mpesa.b2b.transfer(
            amount=500,
            party_a='600000',
            party_b='600001',
            result_url=RESULT_URL,
            queue_timeout_url=TIMEOUT_URL,
            account_reference='353353',
        )

        body = daraja.json_sent_to('/mpesa/b2b/v1/paymentrequest')
        assert body['Initiator'] == 'testapi'
        assert body['CommandID'] == 'BusinessToBusinessTransfer'
        assert body['SenderIdentifierType'] == 4
        assert body['RecieverIdentifierType'] == 4
        assert body['AccountReference'] == '353353'
        assert 'Requester' not in body

    @pytest.mark.asyncio
    async def test_transfer_to_phone_number_receiver(self, daraja, mpesa):
        daraja.route('/mpesa/b2b/v1/paymentrequest', respond(200, ACCEPTED))

        await mpesa.b2b.transfer(
            amount=500,
            party_a='600000',
            party_b='0708374149',
            result_url=RESULT_URL,
            queue_timeout_url=TIMEOUT_URL,
            receiver_identifier_type=1,
        )

        body = daraja.json_sent_to('/mpesa/b2b/v1/paymentrequest')
        assert body['PartyB'] == '254708374149'
        assert body['RecieverIdentifierType'] == 1

    @pytest.mark.asyncio
    async def test_invalid_short_code(self, daraja, mpesa):
        with pytest.raises(ValidationError):
            await mpesa.b2b.transfer(500, '60', '600001', RESULT_URL, TIMEOUT_URL)
        assert daraja.requests == []


class TestAccountBalance:

    @pytest.mark.asyncio
    async def test_get_balance_body(self, daraja, mpesa):
        daraja.route('/mpesa/accountbalance/v1/query', respond(200, ACCEPTED))

        response = await mpesa.account.get_balance('600000', RESULT_URL, TIMEOUT_URL)

        body = daraja.json_sent_to('/mpesa/accountbalance/v1/query')
        assert body['CommandID'] == 'AccountBalance'
        assert body['IdentifierType'] == 4
        assert body['Remarks'] == 'None'
        assert response.conversation_id == ACCEPTED['ConversationID']

    @pytest.mark.asyncio
    async def test_rejects_relative_result_url(self, daraja, mpesa):
        with pytest.raises(InvalidURLError):
            await mpesa.account.get_balance('600000', '/result', TIMEOUT_URL)
        assert daraja.requests == []


class TestC2B:

    @pytest.mark.asyncio
    async def test_register_urls_body(self, daraja, mpesa):
        daraja.route('/mpesa/c2b/v1/registerurl', respond(200, {
            'OriginatorCoversationID': '7619-37765134-1',
            'ResponseCode': '0',
            'ResponseDescription': 'success',
        }))

        await mpesa.c2b.register_urls(
            '600000', 'https://example.com/confirm', 'https://example.com/validate',
            response_type='Cancelled',
        )

        assert daraja.json_sent_to('/mpesa/c2b/v1/registerurl') == {
            'ShortCode': '600000',
            'ResponseType': 'Cancelled',
            'ConfirmationURL': 'https://example.com/confirm',
            'ValidationURL': 'https://example.com/validate',
        }

    @pytest.mark.asyncio
    async def test_simulate_body(self, daraja, mpesa):
        daraja.route('/mpesa/c2b/v1/simulate', respond(200, {
            'OriginatorCoversationID': '53e3-4aa8-9fe0-8fb5e4092cdd3405976',
            'ResponseCode': '0',
            'ResponseDescription': 'Accept the service request successfully.',
        }))

        response = await mpesa.c2b.simulate('600000', 10, '254708374149', bill_ref_number='INV-1')

        body = daraja.json_sent_to('/mpesa/c2b/v1/simulate')
        assert body == {
            'ShortCode': '600000',
            'CommandID': 'CustomerPayBillOnline',
            'Amount': 10,
            'Msisdn': '254708374149',
            'BillRefNumber': 'INV-1',
        }
        assert response.originator_conversation_id == '53e3-4aa8-9fe0-8fb5e4092cdd3405976'

    @pytest.mark.asyncio
    async def test_simulate_is_sandbox_only(self, daraja, build_client):
        client = build_client(Environment.PRODUCTION)

        with pytest.raises(ValidationError):
            await client.c2b.simulate('600000', 10, '254708374149')
        assert daraja.requests == []


class TestTransactions:

    @pytest.mark.asyncio
    async def test_reverse_body(self, daraja, mpesa):
        daraja.route('/mpesa/reversal/v1/request', respond(200, ACCEPTED))

        await mpesa.transactions.reverse(
            transaction_id='OEI2AK4Q16',
            amount=100,
            receiver_party='600000',
            result_url=RESULT_URL,
            queue_timeout_url=TIMEOUT_URL,
            remarks='Wrong payment',
        )

        body = daraja.json_sent_to('/mpesa/reversal/v1/request')
        assert body['CommandID'] == 'TransactionReversal'
        assert body['TransactionID'] == 'OEI2AK4Q16'
        assert body['ReceiverParty'] == '600000'
        assert body['RecieverIdentifierType'] == 4
        assert body['SecurityCredential']

    @pytest.mark.asyncio
    async def test_query_status_body(self, daraja, mpesa):
        daraja.route('/mpesa/transactionstatus/v1/query', respond(200, ACCEPTED))

        await mpesa.transactions.query_status(
            transaction_id='OEI2AK4Q16',
            party_a='254708374149',
            identifier_type=IdentifierType.MSISDN,
            result_url=RESULT_URL,
            queue_timeout_url=TIMEOUT_URL,
        )

        body = daraja.json_sent_to('/mpesa/transactionstatus/v1/query')
        assert body['CommandID'] == 'TransactionStatusQuery'
        assert body['PartyA'] == '254708374149'
        assert body['IdentifierType'] == 1

    @pytest.mark.asyncio
    async def test_reverse_to_phone_number_receiver(self, daraja, mpesa):
        daraja.route('/mpesa/reversal/v1/request', respond(200, ACCEPTED))

        await mpesa.transactions.reverse(
            transaction_id='OEI2AK4Q16',
            amount=100,
            receiver_party='0708374149',
            receiver_identifier_type=IdentifierType.MSISDN,
            result_url=RESULT_URL,
            queue_timeout_url=TIMEOUT_URL,
        )

        body = daraja.json_sent_to('/mpesa/reversal/v1/request')
        assert body['ReceiverParty'] == '254708374149'
        assert body['RecieverIdentifierType'] == 1

    @pytest.mark.asyncio
    async def test_short_code_receiver_rejects_phone_number(self, daraja, mpesa):
        with pytest.raises(ValidationError):
            await mpesa.transactions.reverse('OEI2AK4Q16', 100, '254708374149', RESULT_URL, TIMEOUT_URL)
        assert daraja.requests == []

    @pytest.mark.asyncio
    async def test_blank_transaction_id(self, daraja, mpesa):
        with pytest.raises(ValidationError):
            await mpesa.transactions.reverse('  ', 100, '600000', RESULT_URL, TIMEOUT_URL)
        assert daraja.requests == []


class TestDynamicQR:

    @pytest.mark.asyncio
    async def test_generate_body(self, daraja, mpesa):
        daraja.route('/mpesa/qrcode/v1/generate', respond(200, {
            'ResponseCode': 'AG_20191219_000043fdf61864fe9ff5',
            'RequestID': '16738-27456357-1',
            'ResponseDescription': 'QR Code Successfully Generated.',
            'QRCode': 'iVBORw0KGgoAAAANSUhEUgAAASwAAAEs',
        }))

        response = await mpesa.qr.generate('TEST SUPERMARKET', 'Invoice Test', 1, TransactionCode.BUY_GOODS, '373132')

        assert daraja.json_sent_to('/mpesa/qrcode/v1/generate') == {
            'MerchantName': 'TEST SUPERMARKET',
            'RefNo': 'Invoice Test',
            'Amount': 1,
            'TrxCode': 'BG',
            'CPI': '373132',
            'Size': '300',
        }
        assert response.qr_code.startswith('iVBOR')

    @pytest.mark.asyncio
    async def test_unknown_transaction_code(self, daraja, mpesa):
        with pytest.raises(ValidationError):
            await mpesa.qr.generate('Shop', 'ref', 1, 'XX', '373132')
        assert daraja.requests == []


class TestExpress:

    EXPRESS_OK = {
        'MerchantRequestID': '29115-34620561-1',
        'CheckoutRequestID': 'ws_CO_191220191020363925',
        'ResponseCode': '0',
        'ResponseDescription': 'Success. Request accepted for processing',
        'CustomerMessage': 'Success. Request accepted for processing',
    }

    @pytest.mark.asyncio
    async def test_stk_push_body(self, daraja, mpesa):
        daraja.route('/mpesa/stkpush/v1/processrequest', respond(200, self.EXPRESS_OK))

        response = await mpesa.express.stk_push(
            business_short_code='174379',
            amount=1,
            phone_number='0708374149',
            callback_url='https://example.com/callback',
            account_reference='CompanyXLTD',
            transaction_desc='Payment',
            timestamp=datetime(2024, 1, 18, 14, 30, 0),
        )

        body = daraja.json_sent_to('/mpesa/stkpush/v1/processrequest')
        expected_password = base64.b64encode(
            f'174379{DEFAULT_PASSKEY}20240118143000'.encode()
        ).decode()
        assert body['Timestamp'] == '20240118143000'
        assert body['Password'] == expected_password
        assert body['TransactionType'] == 'CustomerPayBillOnline'
        assert body['PartyA'] == '254708374149'
        assert body['PartyB'] == '174379'
        assert body['PhoneNumber'] == '254708374149'
        assert body['CallBackURL'] == 'https://example.com/callback'
        assert 'SecurityCredential' not in body
        assert response.checkout_request_id == 'ws_CO_191220191020363925'

    @pytest.mark.asyncio
    async def test_password_uses_configured_pass_key(self, build_client):
        client = build_client(pass_key='my-pass-key')

        password = client.express.build_password('174379', '20240118143000')

        assert base64.b64decode(password) == b'174379my-pass-key20240118143000'

    @pytest.mark.asyncio
    async def test_account_reference_too_long(self, daraja, mpesa):
        with pytest.raises(ValidationError):
            await mpesa.express.stk_push('174379', 1, '0708374149', 'https://example.com/cb', 'X' * 13)
        assert daraja.requests == []

    @pytest.mark.asyncio
    async def test_invalid_phone_number(self, daraja, mpesa):
        with pytest.raises(InvalidPhoneNumberError):
            await mpesa.express.stk_push('174379', 1, '0808374149', 'https://example.com/cb', 'ref')
        assert daraja.requests == []

    @pytest.mark.asyncio
    async def test_query_body(self, daraja, mpesa):
        daraja.route('/mpesa/stkpushquery/v1/query', respond(200, {
            **self.EXPRESS_OK,
            'ResultCode': 0,
            'ResultDesc': 'The service request is processed successfully.',
        }))

        response = await mpesa.express.query(
            '174379', 'ws_CO_191220191020363925', timestamp=datetime(2024, 1, 18, 14, 30, 0)
        )

        body = daraja.json_sent_to('/mpesa/stkpushquery/v1/query')
        assert body['CheckoutRequestID'] == 'ws_CO_191220191020363925'
        assert body['Timestamp'] == '20240118143000'
        assert response.result_code == '0'


class TestBillManager:

    @pytest.mark.asyncio
    async def test_onboard_body(self, daraja, mpesa):
        daraja.route('/v1/billmanager-invoice/optin', respond(200, {
            'app_key': 'AG_2376487236_126732989KJ', 'resmsg': 'Success', 'rescode': '200'
        }))

        response = await mpesa.bill_manager.onboard(
            short_code='718003',
            email='youremail@gmail.com',
            official_contact='0710000000',
            callback_url='https://example.com/bills',
            logo='https://example.com/logo.png',
            send_reminders=SendRemindersType.DISABLE,
        )

        assert daraja.json_sent_to('/v1/billmanager-invoice/optin') == {
            'callbackurl': 'https://example.com/bills',
            'email': 'youremail@gmail.com',
            'logo': 'https://example.com/logo.png',
            'officialContact': '254710000000',
            'sendReminders': 0,
            'shortcode': '718003',
        }
        assert response.app_key == 'AG_2376487236_126732989KJ'
        assert response.res_code == '200'

    @pytest.mark.asyncio
    async def test_single_invoice_body(self, daraja, mpesa):
        daraja.route('/v1/billmanager-invoice/single-invoicing', respond(200, BILL_OK))

        await mpesa.bill_manager.send_single_invoice(**invoice(
            invoice_items=[{'item_name': 'Water', 'amount': 300}]
        ))

        body = daraja.json_sent_to('/v1/billmanager-invoice/single-invoicing')
        assert body['billedPeriod'] == 'August 2024'
        assert body['dueDate'] == '2024-09-15 00:00:00'
        assert body['billedPhoneNumber'] == '254722000000'
        assert body['invoiceItems'] == [{'itemName': 'Water', 'amount': 300}]

    @pytest.mark.asyncio
    async def test_bulk_invoices_are_sent_as_array(self, daraja, mpesa):
        daraja.route('/v1/billmanager-invoice/bulk-invoicing', respond(200, BILL_OK))

        await mpesa.bill_manager.send_bulk_invoices([
            invoice(external_reference='INV-1'),
            invoice(external_reference='INV-2', due_date='2024-10-01 00:00:00'),
        ])

        body = daraja.json_sent_to('/v1/billmanager-invoice/bulk-invoicing')
        assert isinstance(body, list)
        assert [i['externalReference'] for i in body] == ['INV-1', 'INV-2']
        assert 'invoiceItems' not in body[0]

    @pytest.mark.asyncio
    async def test_bulk_invoice_limits(self, daraja, mpesa):
        with pytest.raises(ValidationError):
            await mpesa.bill_manager.send_bulk_invoices([])
        with pytest.raises(ValidationError):
            await mpesa.bill_manager.send_bulk_invoices([invoice()] * (MAX_BULK_INVOICES + 1))
        assert daraja.requests == []

    @pytest.mark.asyncio
    async def test_cancel_invoice_body(self, daraja, mpesa):
        daraja.route('/v1/billmanager-invoice/cancel-single-invoice', respond(200, BILL_OK))

        response = await mpesa.bill_manager.cancel_invoice('INV-1')

        assert daraja.json_sent_to('/v1/billmanager-invoice/cancel-single-invoice') == {
            'externalReference': 'INV-1'
        }
        assert response.res_msg == 'Success'

    @pytest.mark.asyncio
    async def test_reconcile_body(self, daraja, mpesa):
        daraja.route('/v1/billmanager-invoice/reconciliation', respond(200, BILL_OK))

        await mpesa.bill_manager.reconcile(
            account_reference='A1',
            external_reference='INV-1',
            full_name='John Doe',
            invoice_name='Rent',
            paid_amount=800,
            payment_date=datetime(2024, 9, 10, 8, 15, 0),
            phone_number='0722000000',
            transaction_id='PJB53MYR1N',
        )

        body = daraja.json_sent_to('/v1/billmanager-invoice/reconciliation')
        assert body['paidAmount'] == 800
        assert body['paymentDate'] == '2024-09-10 08:15:00'
        assert body['transactionId'] == 'PJB53MYR1N'
