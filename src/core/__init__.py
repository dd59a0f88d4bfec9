"""
Core Domain Layer - El Hexágono.

Este paquete contiene la lógica de negocio pura del motor de tickets
de la pista, sin dependencias de frameworks.
Características:
- Cero dependencias externas (Django, Celery, etc.)
- 100% testeable sin base de datos
- Agnóstico a la infraestructura
"""
