from django.apps import AppConfig


class MpesaAppConfig(AppConfig):
    name = 'mpesa'
    verbose_name = 'M-PESA'
