"""
Management command to request an M-PESA account balance.
"""

import asyncio

from django.core.management.base import BaseCommand, CommandError

from mpesa.client import Mpesa
from mpesa.exceptions import MpesaException


class Command(BaseCommand):
    help = 'Request the balance of an M-PESA short code'

    def add_arguments(self, parser):
        parser.add_argument(
            '--party-a',
            type=str,
            required=True,
            help='Short code whose balance is requested (e.g., 600000)'
        )
        parser.add_argument(
            '--result-url',
            type=str,
            required=True,
            help='URL receiving the balance result'
        )
        parser.add_argument(
            '--timeout-url',
            type=str,
            required=True,
            help='URL notified when the request times out'
        )
        parser.add_argument(
            '--remarks',
            type=str,
            default='Balance check',
            help='Comments sent along with the request'
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS('\n=== M-PESA Account Balance ===\n'))
        self.stdout.write(f"Requesting balance for {options['party_a']}...")

        try:
            response = asyncio.run(self._request_balance(options))
        except MpesaException as e:
            raise CommandError(f"Balance request failed: {e.message}")

        self.stdout.write(self.style.SUCCESS(f"Request accepted: {response.response_description}"))
        self.stdout.write(f"Conversation ID: {response.conversation_id}")
        self.stdout.write(f"Originator Conversation ID: {response.originator_conversation_id}")
        self.stdout.write(f"The balance will be posted to {options['result_url']}")

    async def _request_balance(self, options):
        async with Mpesa.from_settings() as mpesa:
            return await mpesa.account.get_balance(
                party_a=options['party_a'],
                result_url=options['result_url'],
                queue_timeout_url=options['timeout_url'],
                remarks=options['remarks']
            )
