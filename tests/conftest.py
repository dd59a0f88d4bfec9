"""
Configuración global de Pytest para el motor de tickets de la pista.

Este archivo es cargado automáticamente por pytest y define las
opciones y marcadores compartidos.
"""

import sys
from pathlib import Path

import pytest

# Raíz del proyecto en el path para los imports `src.*`
project_root_path = Path(__file__).parent.parent
sys.path.insert(0, str(project_root_path))


@pytest.fixture(scope="session")
def project_root():
    """Retorna la ruta raíz del proyecto."""
    return project_root_path


@pytest.fixture(autouse=True)
def reset_container():
    """El container global no se comparte entre tests."""
    yield
    from src.config.container import reset_container as _reset

    _reset()


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "slow: tests lentos (deseleccionar con '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: tests contra la base de datos de Django"
    )


def pytest_collection_modifyitems(config, items):
    """Salta los tests de integración salvo con --run-integration."""
    if config.getoption("--run-integration", default=False):
        return

    skip_integration = pytest.mark.skip(reason="Requiere --run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def pytest_addoption(parser):
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="ejecutar tests de integración",
    )
