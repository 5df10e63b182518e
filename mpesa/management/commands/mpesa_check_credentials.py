"""
Management command to check that the configured M-PESA credentials work.
"""

import asyncio

from django.core.management.base import BaseCommand, CommandError

from mpesa.client import Mpesa
from mpesa.exceptions import MpesaException


class Command(BaseCommand):
    help = 'Fetch an M-PESA access token with the configured credentials'

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS('\n=== M-PESA Credentials Check ===\n'))

        try:
            lifetime, environment = asyncio.run(self._fetch_token())
        except MpesaException as e:
            raise CommandError(f"Credentials check failed: {e.message}")

        self.stdout.write(f"Environment: {environment}")
        self.stdout.write(self.style.SUCCESS(f"Access token obtained, valid for {lifetime} seconds"))

    async def _fetch_token(self):
        async with Mpesa.from_settings() as mpesa:
            token = await mpesa.get_token()
            return token.expires_in, mpesa.environment.value
