"""
Configuración del Django App de Facturación (tarifas y clientes).
"""

from django.apps import AppConfig


class BillingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.billing'
    label = 'billing'
    verbose_name = 'Tarifas y clientes'
