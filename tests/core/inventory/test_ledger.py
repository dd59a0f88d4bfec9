"""
Tests del InventoryLedger: reservas, liberaciones y concurrencia.

Estrategia:
- InMemoryServicioRepository con compare-and-set real
- Hilos que compiten por el mismo servicio
"""

import threading
from decimal import Decimal

import pytest

from src.core.inventory.entities import ServicioEntity
from src.core.inventory.ledger import InventoryLedger
from src.core.inventory.ports import InMemoryServicioRepository, ServicioRepository
from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    ConcurrencyError,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)


def _servicio(repo, stock=5, requiere_inventario=True):
    servicio = ServicioEntity.crear(
        nombre="Kart infantil",
        precio=Decimal("50"),
        requiere_inventario=requiere_inventario,
        stock_actual=stock if requiere_inventario else None,
    )
    repo.save(servicio)
    return servicio


class RepoSiempreEnConflicto(InMemoryServicioRepository):
    """Simula otro proceso que siempre escribe primero."""

    def __init__(self):
        super().__init__()
        self.intentos = 0

    def compare_and_set_stock(self, servicio_id, esperado, nuevo):
        self.intentos += 1
        return False


class TestInventoryLedger:

    def test_repo_cumple_el_protocolo(self):
        assert isinstance(InMemoryServicioRepository(), ServicioRepository)

    def test_reservar_descuenta(self):
        repo = InMemoryServicioRepository()
        servicio = _servicio(repo, stock=5)

        restante = InventoryLedger(repo).reservar(servicio.id, 2)

        assert restante == 3
        assert repo.get_by_id(servicio.id).stock_actual == 3

    def test_liberar_devuelve(self):
        repo = InMemoryServicioRepository()
        servicio = _servicio(repo, stock=1)
        ledger = InventoryLedger(repo)

        ledger.reservar(servicio.id, 1)
        ledger.liberar(servicio.id, 1)

        assert repo.get_by_id(servicio.id).stock_actual == 1

    def test_stock_insuficiente_no_modifica(self):
        """Una reserva rechazada no debe tocar el stock."""
        repo = InMemoryServicioRepository()
        servicio = _servicio(repo, stock=2)

        with pytest.raises(InsufficientStockError) as exc_info:
            InventoryLedger(repo).reservar(servicio.id, 3)

        assert exc_info.value.disponible == 2
        assert repo.get_by_id(servicio.id).stock_actual == 2

    def test_stock_vacio_cuenta_como_cero(self):
        repo = InMemoryServicioRepository()
        servicio = _servicio(repo)
        servicio.stock_actual = None
        repo.save(servicio)

        with pytest.raises(InsufficientStockError):
            InventoryLedger(repo).reservar(servicio.id, 1)

    def test_servicio_sin_inventario(self):
        repo = InMemoryServicioRepository()
        servicio = _servicio(repo, requiere_inventario=False)

        with pytest.raises(BusinessRuleViolationError):
            InventoryLedger(repo).reservar(servicio.id, 1)

    def test_servicio_inexistente(self):
        with pytest.raises(EntityNotFoundError):
            InventoryLedger(InMemoryServicioRepository()).reservar("no-existe", 1)

    def test_cantidad_invalida(self):
        repo = InMemoryServicioRepository()
        servicio = _servicio(repo)

        with pytest.raises(ValidationError):
            InventoryLedger(repo).reservar(servicio.id, 0)

    def test_reintentos_agotados(self):
        """Debe lanzar ConcurrencyError tras max_tentativas conflictos."""
        repo = RepoSiempreEnConflicto()
        servicio = _servicio(repo, stock=5)

        with pytest.raises(ConcurrencyError):
            InventoryLedger(repo, max_tentativas=3).reservar(servicio.id, 1)

        assert repo.intentos == 3
        assert repo.get_by_id(servicio.id).stock_actual == 5

    def test_max_tentativas_minimo(self):
        with pytest.raises(ValueError):
            InventoryLedger(InMemoryServicioRepository(), max_tentativas=0)

    def test_liberar_linea_con_catalogo_editado(self):
        """Una línea que reservó stock lo devuelve aunque el catálogo ya no lo controle."""
        repo = InMemoryServicioRepository()
        servicio = _servicio(repo, stock=5)
        ledger = InventoryLedger(repo)
        ledger.reservar(servicio.id, 2)
        editado = repo.get_by_id(servicio.id)
        editado.requiere_inventario = False
        repo.save(editado)

        with pytest.raises(BusinessRuleViolationError):
            ledger.liberar(servicio.id, 2)
        restante = ledger.liberar_linea(servicio.id, 2)

        assert restante == 5
        assert repo.get_by_id(servicio.id).stock_actual == 5

    def test_reservar_linea_compensa(self):
        repo = InMemoryServicioRepository()
        servicio = _servicio(repo, stock=3)
        ledger = InventoryLedger(repo)

        ledger.liberar_linea(servicio.id, 2)
        ledger.reservar_linea(servicio.id, 2)

        assert repo.get_by_id(servicio.id).stock_actual == 3

    def test_liberar_linea_servicio_eliminado(self):
        assert InventoryLedger(InMemoryServicioRepository()).liberar_linea("no-existe", 1) is None


class TestInventoryLedgerConcurrente:

    def _competir(self, repo, servicio_id, hilos):
        ledger = InventoryLedger(repo, max_tentativas=100)
        barrera = threading.Barrier(hilos)
        exitos, rechazos = [], []
        lock = threading.Lock()

        def reservar():
            barrera.wait()
            try:
                ledger.reservar(servicio_id, 1)
            except InsufficientStockError:
                with lock:
                    rechazos.append(1)
            else:
                with lock:
                    exitos.append(1)

        workers = [threading.Thread(target=reservar) for _ in range(hilos)]
        for w in workers:
            w.start()
        for w in workers:
            w.join()
        return len(exitos), len(rechazos)

    def test_ultima_unidad(self):
        """Con stock 1, exactamente una reserva concurrente gana."""
        repo = InMemoryServicioRepository()
        servicio = _servicio(repo, stock=1)

        exitos, rechazos = self._competir(repo, servicio.id, hilos=8)

        assert exitos == 1
        assert rechazos == 7
        assert repo.get_by_id(servicio.id).stock_actual == 0

    def test_nunca_negativo(self):
        repo = InMemoryServicioRepository()
        servicio = _servicio(repo, stock=5)

        exitos, rechazos = self._competir(repo, servicio.id, hilos=20)

        assert exitos == 5
        assert rechazos == 15
        assert repo.get_by_id(servicio.id).stock_actual == 0
