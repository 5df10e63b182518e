"""
Security credential generation for initiator based M-PESA endpoints.

M-PESA authenticates initiator requests by decrypting the SecurityCredential
field: the initiator password encrypted with M-PESA's public key (an X.509
certificate) and base64 encoded.
"""

import base64
import logging
from typing import Dict, Optional

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .constants import Environment
from .exceptions import EncryptionError

logger = logging.getLogger(__name__)


class CredentialEncryptor:
    """
    Encrypts initiator passwords with the environment's public certificate.

    Stateless apart from the certificates it was built with, so one instance
    can be shared freely between clients and tasks.
    """

    def __init__(self, certificates: Optional[Dict[Environment, bytes]] = None):
        """
        Args:
            certificates: PEM certificates by environment. Environments not
                listed fall back to a certificate bundled in
                ``mpesa/certificates/<environment>.cer``, if one is installed.
        """
        self._certificates = dict(certificates or {})

    def certificate_for(self, environment: Environment) -> bytes:
        """
        Raises:
            EncryptionError: If no certificate is configured for the environment
        """
        certificate = self._certificates.get(environment) or environment.certificate
        if not certificate:
            raise EncryptionError(
                f"No M-PESA {environment.value} certificate configured; "
                "set MPESA_CERTIFICATE_PATH or pass certificates to CredentialEncryptor"
            )
        return certificate

    def _load_public_key(self, environment: Environment) -> rsa.RSAPublicKey:
        pem = self.certificate_for(environment)
        try:
            cert = x509.load_pem_x509_certificate(pem)
            public_key = cert.public_key()
        except (ValueError, TypeError, OSError) as e:
            raise EncryptionError(f"Invalid {environment.value} certificate: {e}")

        if not isinstance(public_key, rsa.RSAPublicKey):
            raise EncryptionError(
                f"The {environment.value} certificate does not hold an RSA public key"
            )
        return public_key

    def encrypt(self, plaintext: str, environment: Environment) -> str:
        """
        Encrypt a plaintext initiator password.

        PKCS#1 v1.5 padding is randomized, so two calls with the same input
        return different strings that both decrypt to the input.

        Args:
            plaintext: Initiator password
            environment: Environment whose certificate is used

        Returns:
            Base64 encoded ciphertext

        Raises:
            EncryptionError: If the certificate is unusable or the password
                is too long for the key
        """
        public_key = self._load_public_key(environment)
        try:
            ciphertext = public_key.encrypt(plaintext.encode('utf-8'), padding.PKCS1v15())
        except ValueError:
            # The message may echo the input, so it is not forwarded.
            raise EncryptionError("Initiator password could not be encrypted with the certificate key")

        logger.debug(f"Generated security credential for {environment.value}")
        return base64.b64encode(ciphertext).decode('ascii')

