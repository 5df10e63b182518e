"""Shared test fixtures."""

import datetime
import json

import django
import httpx
import pytest
import pytest_asyncio
from django.conf import settings

if not settings.configured:
    settings.configure(
        INSTALLED_APPS=['mpesa'],
        MPESA_CONSUMER_KEY='settings-consumer-key',
        MPESA_CONSUMER_SECRET='settings-consumer-secret',
        MPESA_ENVIRONMENT='sandbox',
        MPESA_INITIATOR_NAME='testapi',
        MPESA_INITIATOR_PASSWORD='Safaricom999!*!',
        MPESA_TOKEN_EXPIRY_MARGIN=0,
    )
    django.setup()

from cryptography import x509  # noqa: E402
from cryptography.hazmat.primitives import hashes, serialization  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import rsa  # noqa: E402
from cryptography.x509.oid import NameOID  # noqa: E402

from mpesa.client import Mpesa  # noqa: E402
from mpesa.constants import Environment  # noqa: E402
from mpesa.security import CredentialEncryptor  # noqa: E402
from mpesa.utils.http_client import HTTPClient  # noqa: E402

TOKEN_PATH = '/oauth/v1/generate'
INITIATOR_PASSWORD = 'Safaricom999!*!'


def make_certificate(private_key, common_name='test.mpesa.local') -> bytes:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .sign(private_key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM)


def respond(status=200, json_body=None, text=None):
    """Build a route handler answering with a fresh response each time."""
    def handler(request):
        if json_body is not None:
            return httpx.Response(status, json=json_body)
        return httpx.Response(status, text=text or '')
    return handler


def fail_with(exc_class, message='boom'):
    """Build a route handler raising an httpx transport error."""
    def handler(request):
        raise exc_class(message, request=request)
    return handler


class FakeDaraja:
    """Records requests and answers them by path, like the Daraja API would."""

    def __init__(self):
        self.requests = []
        self.routes = {
            TOKEN_PATH: respond(200, {'access_token': 'test-token', 'expires_in': '3599'}),
        }

    def route(self, path, handler):
        self.routes[path] = handler

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path, respond(404, text='Not Found'))
        return handler(request)

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)

    def calls_to(self, path):
        return [r for r in self.requests if r.url.path == path]

    def json_sent_to(self, path, index=-1):
        return json.loads(self.calls_to(path)[index].content)

    @property
    def token_calls(self):
        return self.calls_to(TOKEN_PATH)


@pytest.fixture(scope='session')
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope='session')
def certificate_pem(rsa_key):
    return make_certificate(rsa_key)


@pytest.fixture
def encryptor(certificate_pem):
    return CredentialEncryptor({
        Environment.SANDBOX: certificate_pem,
        Environment.PRODUCTION: certificate_pem,
    })


@pytest.fixture
def daraja():
    return FakeDaraja()


@pytest.fixture
def build_client(daraja, encryptor):
    """Factory for clients talking to the fake Daraja API."""
    def build(environment=Environment.SANDBOX, **kwargs):
        options = {
            'initiator_name': 'testapi',
            'initiator_password': INITIATOR_PASSWORD,
            'encryptor': encryptor,
            'http_client': HTTPClient(environment.base_url, transport=daraja.transport),
        }
        options.update(kwargs)
        return Mpesa('consumer-key', 'consumer-secret', environment, **options)
    return build


@pytest_asyncio.fixture
async def mpesa(build_client):
    client = build_client()
    yield client
    await client.close()
