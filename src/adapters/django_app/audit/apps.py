"""
Configuración del Django App de Auditoría.
"""

from django.apps import AppConfig


class AuditConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'src.adapters.django_app.audit'
    label = 'audit'
    verbose_name = 'Auditoría'
