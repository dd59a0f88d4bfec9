"""
Configuración del Django App de Inventario (catálogo de servicios).
"""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.inventory'
    label = 'inventory'
    verbose_name = 'Servicios e inventario'
