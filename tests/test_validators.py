"""Tests for input validators and formatters."""

from datetime import date, datetime

import pytest

from mpesa.constants import CommandId, IdentifierType
from mpesa.exceptions import InvalidAmountError, InvalidPhoneNumberError, InvalidURLError, ValidationError
from mpesa.utils.formatters import (
    encode_express_password, format_amount, format_bill_date, format_billed_period, format_timestamp
)
from mpesa.utils.validators import (
    validate_amount, validate_choice, validate_email, validate_party, validate_phone_number,
    validate_required, validate_short_code, validate_url
)


@pytest.mark.parametrize('raw, expected', [
    ('0712345678', '254712345678'),
    ('712345678', '254712345678'),
    ('+254712345678', '254712345678'),
    ('254 712 345 678', '254712345678'),
    ('0110345678', '254110345678'),
])
def test_phone_numbers_are_normalised(raw, expected):
    assert validate_phone_number(raw) == expected


@pytest.mark.parametrize('raw', ['', None, '07123', '0812345678', '07123456789', 'phone'])
def test_invalid_phone_numbers(raw):
    with pytest.raises(InvalidPhoneNumberError):
        validate_phone_number(raw)


@pytest.mark.parametrize('raw, expected', [(1, 1), ('250', 250), (99.0, 99), ('1000.00', 1000)])
def test_valid_amounts(raw, expected):
    assert validate_amount(raw) == expected


@pytest.mark.parametrize('raw', [0, -1, '0', 10.5, 'abc', None, True, float('nan'), float('inf')])
def test_invalid_amounts(raw):
    with pytest.raises(InvalidAmountError):
        validate_amount(raw)


def test_amount_bounds():
    with pytest.raises(InvalidAmountError):
        validate_amount(5, min_amount=10)
    with pytest.raises(InvalidAmountError):
        validate_amount(150001, max_amount=150000)


@pytest.mark.parametrize('raw', ['', 'example.com/result', 'ftp://example.com', '/callback'])
def test_invalid_urls(raw):
    with pytest.raises(InvalidURLError):
        validate_url(raw, 'Result URL')


def test_valid_url_is_stripped():
    assert validate_url(' https://example.com/result ') == 'https://example.com/result'


def test_required_text():
    assert validate_required('  ref ', 'Reference') == 'ref'
    with pytest.raises(ValidationError):
        validate_required(None, 'Reference')
    with pytest.raises(ValidationError):
        validate_required('   ', 'Reference')
    with pytest.raises(ValidationError, match='too long'):
        validate_required('x' * 13, 'Reference', max_length=12)


@pytest.mark.parametrize('raw', ['600000', '17437', 600000, '1234567'])
def test_valid_short_codes(raw):
    assert validate_short_code(raw) == str(raw)


@pytest.mark.parametrize('raw', ['1234', '12345678', 'abcde', ''])
def test_invalid_short_codes(raw):
    with pytest.raises(ValidationError):
        validate_short_code(raw)


def test_choice_accepts_members_and_values():
    assert validate_choice('SalaryPayment', list(CommandId), 'command id') is CommandId.SALARY_PAYMENT
    assert validate_choice(4, list(IdentifierType), 'identifier type') is IdentifierType.SHORT_CODE
    with pytest.raises(ValidationError):
        validate_choice('Nope', list(CommandId), 'command id')


def test_email():
    assert validate_email(None) is None
    assert validate_email(' a@b.co ') == 'a@b.co'
    with pytest.raises(ValidationError):
        validate_email('not-an-email')


def test_timestamp_format():
    assert format_timestamp(datetime(2024, 1, 18, 14, 30, 5)) == '20240118143005'
    assert len(format_timestamp()) == 14


def test_express_password():
    assert encode_express_password('174379', 'key', '20240118143005') == 'MTc0Mzc5a2V5MjAyNDAxMTgxNDMwMDU='


def test_bill_formats():
    assert format_bill_date(date(2024, 9, 15)) == '2024-09-15 00:00:00'
    assert format_bill_date(datetime(2024, 9, 15, 8, 1, 2)) == '2024-09-15 08:01:02'
    assert format_bill_date('2024-09-15 00:00:00') == '2024-09-15 00:00:00'
    assert format_bill_date(None) is None
    assert format_billed_period(date(2024, 8, 1)) == 'August 2024'
    assert format_amount(150000) == 'KES 150,000'


def test_party_is_validated_by_identifier_type():
    assert validate_party('0708374149', IdentifierType.MSISDN) == '254708374149'
    assert validate_party('600000', IdentifierType.SHORT_CODE) == '600000'
    assert validate_party('600000', IdentifierType.TILL_NUMBER) == '600000'
    with pytest.raises(ValidationError):
        validate_party('254708374149', IdentifierType.SHORT_CODE)
    with pytest.raises(InvalidPhoneNumberError):
        validate_party('600000', IdentifierType.MSISDN)
