"""
Configuración del motor de tickets de la pista.

Módulos:
- settings: Configuración Django (python-dotenv)
- celery: App Celery para los handlers de eventos
- container: Dependency Injection Container
"""

# Importar la app Celery para que se cargue junto con Django
from .celery import app as celery_app

__all__ = ('celery_app',)
