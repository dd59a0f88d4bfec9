"""
Tests Unitarios de los Use Cases del Dominio de Tickets.

Estrategia:
- Repositorios en memoria (fakes) con compare-and-set real
- InMemoryUnitOfWork con sink de auditoría en memoria
- FixedClock para controlar el tiempo
- Hilos para las carreras entre operaciones

Coverage:
- AbrirTicketService
- PausarTicketService / ReanudarTicketService
- AgregarServicioService
- CerrarTicketService
- CancelarTicketService
- PrevisualizarCobroService
- ObtenerTicketService / ListarTicketsService
"""

import threading
from datetime import time, timedelta
from decimal import Decimal

import pytest

from src.core.billing.entities import TarifaEntity
from src.core.shared.exceptions import (
    AuditUnavailableError,
    BusinessRuleViolationError,
    ConcurrencyError,
    EmptyCancelReasonError,
    EntityNotFoundError,
    InsufficientStockError,
    InvalidTransitionError,
    MaxQuantityExceededError,
    NoActiveRateError,
    PermissionDeniedError,
    ValidationError,
)
from src.core.shared.identity import PoliticaRoles
from src.core.tickets.dtos import (
    AbrirTicketInputDTO,
    AgregarServicioInputDTO,
    CancelarTicketInputDTO,
    CerrarTicketInputDTO,
    ListarTicketsQueryDTO,
    PausarTicketInputDTO,
    ReanudarTicketInputDTO,
)
from src.core.tickets.entities import TicketStatus
from src.core.tickets.events import TicketAbiertoEvent


@pytest.fixture
def abierto(motor, tarifa, cliente, operador):
    """Ticket abierto por op-1 a las 10:00."""
    return motor.abrir().execute(
        AbrirTicketInputDTO(cliente_id=cliente.id, personas=2, tarifa_id=tarifa.id),
        operador,
    )


def _acciones(audit_sink, ticket_id):
    return [r.accion for r in audit_sink.registros(ticket_id)]


class TestAbrirTicketService:

    def test_abrir_sucesso(self, abierto, clock, audit_sink, publisher):
        """Debe abrir, auditar y publicar el ticket."""
        assert abierto.estado == "activo"
        assert abierto.hora_entrada == clock.now()
        assert abierto.operador_entrada_id == "op-1"
        assert abierto.version == 1
        assert _acciones(audit_sink, abierto.id) == ["crear_ticket"]
        eventos = publisher.get_events_by_type("TicketAbiertoEvent")
        assert len(eventos) == 1
        assert isinstance(eventos[0], TicketAbiertoEvent)

    def test_persiste(self, abierto, ticket_repo):
        assert ticket_repo.get_by_id(abierto.id).codigo == abierto.codigo

    def test_personas_invalidas(self, motor, tarifa, cliente, operador, ticket_repo, audit_sink):
        with pytest.raises(ValidationError):
            motor.abrir().execute(
                AbrirTicketInputDTO(cliente_id=cliente.id, personas=0, tarifa_id=tarifa.id),
                operador,
            )

        assert ticket_repo.count() == 0
        assert audit_sink.registros() == []

    def test_cliente_inexistente(self, motor, tarifa, operador):
        with pytest.raises(EntityNotFoundError):
            motor.abrir().execute(
                AbrirTicketInputDTO(cliente_id="nadie", personas=1, tarifa_id=tarifa.id),
                operador,
            )

    def test_tarifa_inactiva(self, motor, tarifa, tarifa_repo, cliente, operador):
        tarifa.activo = False
        tarifa_repo.save(tarifa)

        with pytest.raises(NoActiveRateError):
            motor.abrir().execute(
                AbrirTicketInputDTO(cliente_id=cliente.id, personas=1, tarifa_id=tarifa.id),
                operador,
            )

    def test_tarifa_fuera_de_ventana(self, motor, tarifa_repo, cliente, operador):
        """A las 10:00 una tarifa nocturna no puede usarse."""
        nocturna = TarifaEntity.crear(
            nombre="Noche", precio_por_hora=Decimal("80"),
            aplicable_desde=time(22, 0), aplicable_hasta=time(2, 0),
        )
        tarifa_repo.save(nocturna)

        with pytest.raises(NoActiveRateError):
            motor.abrir().execute(
                AbrirTicketInputDTO(cliente_id=cliente.id, personas=1, tarifa_id=nocturna.id),
                operador,
            )


class TestPausarReanudarService:

    def test_pausar_y_reanudar(self, motor, abierto, clock, operador, audit_sink):
        clock.advance(minutes=20)
        pausado = motor.pausar().execute(PausarTicketInputDTO(abierto.id), operador)
        clock.advance(minutes=10)
        reanudado = motor.reanudar().execute(ReanudarTicketInputDTO(abierto.id), operador)

        assert pausado.estado == "pausado"
        assert reanudado.estado == "activo"
        assert reanudado.version == 3
        assert len(reanudado.pausas) == 1
        assert _acciones(audit_sink, abierto.id) == [
            "crear_ticket", "pausar_ticket", "reanudar_ticket",
        ]

    def test_pausar_cerrado(self, motor, abierto, operador, ticket_repo):
        """Pausar un ticket cerrado falla y no toca sus pausas."""
        motor.cerrar().execute(CerrarTicketInputDTO(abierto.id), operador)

        with pytest.raises(InvalidTransitionError):
            motor.pausar().execute(PausarTicketInputDTO(abierto.id), operador)

        assert ticket_repo.get_by_id(abierto.id).pausas == []

    def test_reanudar_activo(self, motor, abierto, operador):
        with pytest.raises(InvalidTransitionError):
            motor.reanudar().execute(ReanudarTicketInputDTO(abierto.id), operador)

    def test_ticket_inexistente(self, motor, operador):
        with pytest.raises(EntityNotFoundError):
            motor.pausar().execute(PausarTicketInputDTO("no-existe"), operador)


class TestAgregarServicioService:

    def test_reserva_stock(self, motor, abierto, casco, operador, servicio_repo, audit_sink):
        output = motor.agregar_servicio().execute(
            AgregarServicioInputDTO(abierto.id, casco.id, 2), operador
        )

        assert len(output.servicios) == 1
        assert output.servicios[0].monto_total == Decimal("40.00")
        assert servicio_repo.get_by_id(casco.id).stock_actual == 3
        registro = audit_sink.registros(abierto.id)[-1]
        assert registro.accion == "agregar_servicio"
        assert registro.detalle["cantidad"] == 2
        assert registro.detalle["stock_resultante"] == 3

    def test_sin_inventario(self, motor, abierto, agua, operador, audit_sink):
        output = motor.agregar_servicio().execute(
            AgregarServicioInputDTO(abierto.id, agua.id, 4), operador
        )

        assert output.servicios[0].monto_total == Decimal("62.00")
        assert audit_sink.registros(abierto.id)[-1].detalle["stock_resultante"] is None

    def test_maximo_por_ticket(self, motor, abierto, casco, operador, servicio_repo):
        """El máximo se evalúa sobre la cantidad acumulada."""
        motor.agregar_servicio().execute(AgregarServicioInputDTO(abierto.id, casco.id, 2), operador)

        with pytest.raises(MaxQuantityExceededError):
            motor.agregar_servicio().execute(
                AgregarServicioInputDTO(abierto.id, casco.id, 2), operador
            )

        assert servicio_repo.get_by_id(casco.id).stock_actual == 3

    def test_stock_insuficiente(self, motor, abierto, casco, operador, servicio_repo, ticket_repo):
        casco.stock_actual = 1
        servicio_repo.save(casco)

        with pytest.raises(InsufficientStockError):
            motor.agregar_servicio().execute(
                AgregarServicioInputDTO(abierto.id, casco.id, 2), operador
            )

        assert servicio_repo.get_by_id(casco.id).stock_actual == 1
        assert ticket_repo.get_by_id(abierto.id).servicios == []

    def test_auditoria_caida_devuelve_stock(
        self, motor, abierto, casco, operador, servicio_repo, ticket_repo, audit_sink
    ):
        """Si la auditoría falla, la reserva se revierte y el ticket no cambia."""
        audit_sink.disponible = False

        with pytest.raises(AuditUnavailableError):
            motor.agregar_servicio().execute(
                AgregarServicioInputDTO(abierto.id, casco.id, 1), operador
            )

        assert servicio_repo.get_by_id(casco.id).stock_actual == 5
        guardado = ticket_repo.get_by_id(abierto.id)
        assert guardado.servicios == []
        assert guardado.version == abierto.version

    def test_servicio_inexistente(self, motor, abierto, operador):
        with pytest.raises(EntityNotFoundError):
            motor.agregar_servicio().execute(
                AgregarServicioInputDTO(abierto.id, "no-existe", 1), operador
            )

    def test_ticket_cerrado(self, motor, abierto, casco, operador, servicio_repo):
        motor.cerrar().execute(CerrarTicketInputDTO(abierto.id), operador)

        with pytest.raises(InvalidTransitionError):
            motor.agregar_servicio().execute(
                AgregarServicioInputDTO(abierto.id, casco.id, 1), operador
            )

        assert servicio_repo.get_by_id(casco.id).stock_actual == 5


class TestCerrarTicketService:

    def test_cobro_completo(self, motor, abierto, casco, clock, operador, servicio_repo):
        """90 min ARRIBA = 200; 10% sobre el tiempo; más 20 de servicios."""
        motor.agregar_servicio().execute(AgregarServicioInputDTO(abierto.id, casco.id, 1), operador)
        clock.advance(minutes=90)

        output = motor.cerrar().execute(
            CerrarTicketInputDTO(abierto.id, metodo_pago="tarjeta"), operador
        )

        assert output.estado == "cerrado"
        assert output.minutos_cobrados == 120
        assert output.monto_tiempo == Decimal("200.00")
        assert output.monto_descuento == Decimal("20.00")
        assert output.monto_servicios == Decimal("20.00")
        assert output.monto_total == Decimal("200.00")
        assert output.metodo_pago == "tarjeta"
        assert output.hora_salida == clock.now()
        assert servicio_repo.get_by_id(casco.id).stock_actual == 4

    def test_pausas_no_se_cobran(self, motor, abierto, clock, operador):
        """70 minutos con 10 de pausa cobran 60 minutos."""
        clock.advance(minutes=20)
        motor.pausar().execute(PausarTicketInputDTO(abierto.id), operador)
        clock.advance(minutes=10)
        motor.reanudar().execute(ReanudarTicketInputDTO(abierto.id), operador)
        clock.advance(minutes=40)

        output = motor.cerrar().execute(CerrarTicketInputDTO(abierto.id), operador)

        assert output.minutos_cobrados == 60
        assert output.monto_total == Decimal("90.00")

    def test_cerrar_pausado(self, motor, abierto, clock, operador):
        clock.advance(minutes=30)
        motor.pausar().execute(PausarTicketInputDTO(abierto.id), operador)
        clock.advance(minutes=15)

        output = motor.cerrar().execute(CerrarTicketInputDTO(abierto.id), operador)

        assert output.pausas[0].fin == clock.now()

    def test_as_of_explicito(self, motor, abierto, clock, operador):
        salida = clock.now() + timedelta(minutes=45)

        output = motor.cerrar().execute(CerrarTicketInputDTO(abierto.id, as_of=salida), operador)

        assert output.hora_salida == salida
        assert output.minutos_cobrados == 60

    def test_as_of_anterior_a_la_entrada(self, motor, abierto, clock, operador, ticket_repo):
        with pytest.raises(ValidationError):
            motor.cerrar().execute(
                CerrarTicketInputDTO(abierto.id, as_of=clock.now() - timedelta(minutes=1)),
                operador,
            )

        assert ticket_repo.get_by_id(abierto.id).estado == TicketStatus.ACTIVO

    def test_cerrar_dos_veces(self, motor, abierto, operador):
        motor.cerrar().execute(CerrarTicketInputDTO(abierto.id), operador)

        with pytest.raises(InvalidTransitionError):
            motor.cerrar().execute(CerrarTicketInputDTO(abierto.id), operador)

    def test_metodo_pago_invalido(self, motor, abierto, operador):
        with pytest.raises(ValidationError):
            motor.cerrar().execute(CerrarTicketInputDTO(abierto.id, metodo_pago="trueque"), operador)

    def test_audita_desglose(self, motor, abierto, clock, operador, audit_sink):
        clock.advance(minutes=90)
        motor.cerrar().execute(CerrarTicketInputDTO(abierto.id), operador)

        registro = audit_sink.registros(abierto.id)[-1]

        assert registro.accion == "cerrar_ticket"
        assert registro.actor_id == "op-1"
        assert registro.detalle["monto_total"] == "180.00"


class TestCancelarTicketService:

    def test_operador_sin_capacidad(self, motor, abierto, operador, ticket_repo):
        with pytest.raises(PermissionDeniedError):
            motor.cancelar().execute(CancelarTicketInputDTO(abierto.id, "error"), operador)

        assert ticket_repo.get_by_id(abierto.id).estado == TicketStatus.ACTIVO

    def test_supervisor_cancela_y_devuelve_stock(
        self, motor, abierto, casco, operador, supervisor, servicio_repo, audit_sink
    ):
        motor.agregar_servicio().execute(AgregarServicioInputDTO(abierto.id, casco.id, 3), operador)
        assert servicio_repo.get_by_id(casco.id).stock_actual == 2

        output = motor.cancelar().execute(
            CancelarTicketInputDTO(abierto.id, "cliente no se presentó"), supervisor
        )

        assert output.estado == "cancelado"
        assert output.motivo_cancelacion == "cliente no se presentó"
        assert output.monto_total is None
        assert servicio_repo.get_by_id(casco.id).stock_actual == 5
        registro = audit_sink.registros(abierto.id)[-1]
        assert registro.accion == "cancelar_ticket"
        assert registro.detalle["lineas_liberadas"] == [{"servicio_id": casco.id, "cantidad": 3}]

    def test_ticket_de_otro_requiere_modificar_otros(self, motor, abierto):
        """Con `cancelar` pero sin `modificar_otros` sólo cancela lo propio."""
        cajero = PoliticaRoles({"cajero": ["cancelar"]}).identidad("caja-1", "cajero")

        with pytest.raises(PermissionDeniedError) as exc_info:
            motor.cancelar().execute(CancelarTicketInputDTO(abierto.id, "error"), cajero)

        assert exc_info.value.capacidad == "modificar_otros"

    def test_cancela_ticket_propio(self, motor, tarifa, cliente):
        cajero = PoliticaRoles({"cajero": ["cancelar"]}).identidad("caja-1", "cajero")
        propio = motor.abrir().execute(
            AbrirTicketInputDTO(cliente_id=cliente.id, personas=1, tarifa_id=tarifa.id),
            cajero,
        )

        output = motor.cancelar().execute(CancelarTicketInputDTO(propio.id, "duplicado"), cajero)

        assert output.estado == "cancelado"

    @pytest.mark.parametrize("motivo", ["", "   "])
    def test_motivo_vacio(self, motor, abierto, supervisor, ticket_repo, motivo):
        with pytest.raises(EmptyCancelReasonError):
            motor.cancelar().execute(CancelarTicketInputDTO(abierto.id, motivo), supervisor)

        assert ticket_repo.get_by_id(abierto.id).estado == TicketStatus.ACTIVO

    def test_cancelar_cerrado(self, motor, abierto, operador, supervisor):
        motor.cerrar().execute(CerrarTicketInputDTO(abierto.id), operador)

        with pytest.raises(InvalidTransitionError):
            motor.cancelar().execute(CancelarTicketInputDTO(abierto.id, "tarde"), supervisor)

    def test_auditoria_caida(self, motor, abierto, casco, operador, supervisor,
                             audit_sink, ticket_repo, servicio_repo):
        motor.agregar_servicio().execute(AgregarServicioInputDTO(abierto.id, casco.id, 1), operador)
        audit_sink.disponible = False

        with pytest.raises(AuditUnavailableError):
            motor.cancelar().execute(CancelarTicketInputDTO(abierto.id, "error"), supervisor)

        assert ticket_repo.get_by_id(abierto.id).estado == TicketStatus.ACTIVO
        assert servicio_repo.get_by_id(casco.id).stock_actual == 4

    def _quitar_inventario_del_catalogo(self, servicio_repo, servicio_id):
        editado = servicio_repo.get_by_id(servicio_id)
        editado.requiere_inventario = False
        servicio_repo.save(editado)

    def test_catalogo_editado_despues_del_alquiler(
        self, motor, abierto, casco, operador, supervisor, ticket_repo, servicio_repo, audit_sink
    ):
        """El stock vuelve según la línea, no según el catálogo actual."""
        motor.agregar_servicio().execute(AgregarServicioInputDTO(abierto.id, casco.id, 1), operador)
        self._quitar_inventario_del_catalogo(servicio_repo, casco.id)

        output = motor.cancelar().execute(CancelarTicketInputDTO(abierto.id, "error"), supervisor)

        assert output.estado == "cancelado"
        assert ticket_repo.get_by_id(abierto.id).estado == TicketStatus.CANCELADO
        assert servicio_repo.get_by_id(casco.id).stock_actual == 5
        assert _acciones(audit_sink, abierto.id) == [
            "crear_ticket", "agregar_servicio", "cancelar_ticket",
        ]

    def test_catalogo_editado_y_auditoria_caida(
        self, motor, abierto, casco, operador, supervisor, ticket_repo, servicio_repo, audit_sink
    ):
        """Si la cancelación falla, la devolución de stock se revierte."""
        motor.agregar_servicio().execute(AgregarServicioInputDTO(abierto.id, casco.id, 2), operador)
        self._quitar_inventario_del_catalogo(servicio_repo, casco.id)
        audit_sink.disponible = False

        with pytest.raises(AuditUnavailableError):
            motor.cancelar().execute(CancelarTicketInputDTO(abierto.id, "error"), supervisor)

        assert ticket_repo.get_by_id(abierto.id).estado == TicketStatus.ACTIVO
        assert servicio_repo.get_by_id(casco.id).stock_actual == 3


class TestPrevisualizarCobroService:

    def test_idempotente(self, motor, abierto, clock, ticket_repo, audit_sink):
        """Dos previsualizaciones iguales sin efectos sobre el ticket."""
        as_of = clock.now() + timedelta(minutes=90)

        primera = motor.previsualizar().execute(abierto.id, as_of)
        segunda = motor.previsualizar().execute(abierto.id, as_of)

        assert primera == segunda
        assert primera.monto_total == Decimal("180.00")
        assert not primera.definitivo
        assert ticket_repo.get_by_id(abierto.id).version == abierto.version
        assert _acciones(audit_sink, abierto.id) == ["crear_ticket"]

    def test_usa_el_reloj(self, motor, abierto, clock):
        clock.advance(minutes=30)

        cobro = motor.previsualizar().execute(abierto.id)

        assert cobro.as_of == clock.now()
        assert cobro.minutos_reales == 30
        assert cobro.minutos_cobrados == 60

    def test_coincide_con_el_cierre(self, motor, abierto, clock, operador):
        clock.advance(minutes=95)
        previa = motor.previsualizar().execute(abierto.id)

        cerrado = motor.cerrar().execute(CerrarTicketInputDTO(abierto.id), operador)

        assert previa.monto_total == cerrado.monto_total

    def test_ticket_cerrado_devuelve_desglose_guardado(self, motor, abierto, clock, operador):
        clock.advance(minutes=90)
        motor.cerrar().execute(CerrarTicketInputDTO(abierto.id), operador)
        clock.advance(hours=5)

        cobro = motor.previsualizar().execute(abierto.id)

        assert cobro.definitivo
        assert cobro.minutos_cobrados == 120
        assert cobro.monto_total == Decimal("180.00")

    def test_ticket_cancelado(self, motor, abierto, supervisor):
        motor.cancelar().execute(CancelarTicketInputDTO(abierto.id, "error"), supervisor)

        with pytest.raises(BusinessRuleViolationError):
            motor.previsualizar().execute(abierto.id)


class TestConsultas:

    def test_obtener_por_codigo(self, motor, abierto):
        assert motor.obtener().execute(codigo=abierto.codigo).id == abierto.id

    def test_obtener_sin_criterio(self, motor):
        with pytest.raises(ValidationError):
            motor.obtener().execute()

    def test_obtener_inexistente(self, motor):
        with pytest.raises(EntityNotFoundError):
            motor.obtener().execute(codigo="TK-00000000-000000")

    def test_listar_por_estado_y_orden(self, motor, abierto, tarifa, cliente, clock, operador):
        clock.advance(minutes=5)
        segundo = motor.abrir().execute(
            AbrirTicketInputDTO(cliente_id=cliente.id, personas=1, tarifa_id=tarifa.id),
            operador,
        )
        motor.pausar().execute(PausarTicketInputDTO(abierto.id), operador)

        todos = motor.listar().execute()
        activos = motor.listar().execute(ListarTicketsQueryDTO(estado="activo"))

        assert [t.id for t in todos] == [segundo.id, abierto.id]
        assert [t.id for t in activos] == [segundo.id]

    def test_listar_estado_invalido(self, motor):
        with pytest.raises(ValidationError):
            motor.listar().execute(ListarTicketsQueryDTO(estado="perdido"))


class TestConcurrencia:

    def _en_paralelo(self, *operaciones):
        """Ejecuta las operaciones a la vez; devuelve resultado o excepción de cada una."""
        barrera = threading.Barrier(len(operaciones))
        resultados = [None] * len(operaciones)

        def correr(indice, operacion):
            barrera.wait()
            try:
                resultados[indice] = operacion()
            except Exception as e:
                resultados[indice] = e

        hilos = [
            threading.Thread(target=correr, args=(i, op))
            for i, op in enumerate(operaciones)
        ]
        for hilo in hilos:
            hilo.start()
        for hilo in hilos:
            hilo.join()
        return resultados

    @pytest.mark.parametrize("ronda", range(10))
    def test_cerrar_contra_cancelar(
        self, motor, tarifa, cliente, casco, operador, supervisor,
        ticket_repo, servicio_repo, audit_sink, ronda
    ):
        """Exactamente una operación terminal gana; la otra ve InvalidTransitionError."""
        ticket = motor.abrir().execute(
            AbrirTicketInputDTO(cliente_id=cliente.id, personas=1, tarifa_id=tarifa.id),
            operador,
        )
        motor.agregar_servicio().execute(AgregarServicioInputDTO(ticket.id, casco.id, 1), operador)
        cerrar, cancelar = motor.cerrar(), motor.cancelar()

        resultados = self._en_paralelo(
            lambda: cerrar.execute(CerrarTicketInputDTO(ticket.id), operador),
            lambda: cancelar.execute(CancelarTicketInputDTO(ticket.id, "carrera"), supervisor),
        )

        errores = [r for r in resultados if isinstance(r, Exception)]
        assert len(errores) == 1
        assert isinstance(errores[0], InvalidTransitionError)

        final = ticket_repo.get_by_id(ticket.id)
        terminales = [
            a for a in _acciones(audit_sink, ticket.id)
            if a in ("cerrar_ticket", "cancelar_ticket")
        ]
        assert len(terminales) == 1
        stock = servicio_repo.get_by_id(casco.id).stock_actual
        if final.estado == TicketStatus.CANCELADO:
            assert terminales == ["cancelar_ticket"]
            assert stock == 5
        else:
            assert final.estado == TicketStatus.CERRADO
            assert terminales == ["cerrar_ticket"]
            assert stock == 4

    def test_pausas_concurrentes(self, motor, abierto, operador, ticket_repo):
        pausar_a, pausar_b = motor.pausar(), motor.pausar()

        resultados = self._en_paralelo(
            lambda: pausar_a.execute(PausarTicketInputDTO(abierto.id), operador),
            lambda: pausar_b.execute(PausarTicketInputDTO(abierto.id), operador),
        )

        errores = [r for r in resultados if isinstance(r, Exception)]
        assert len(errores) == 1
        assert isinstance(errores[0], InvalidTransitionError)
        assert len(ticket_repo.get_by_id(abierto.id).pausas) == 1

    @pytest.mark.parametrize("competidores", [3, 5, 8])
    def test_ultima_unidad_entre_tickets(
        self, motor, tarifa, cliente, casco, operador, servicio_repo, ticket_repo, competidores
    ):
        """Varios tickets compiten por la última unidad: sólo uno la obtiene."""
        casco.stock_actual = 1
        servicio_repo.save(casco)
        tickets = [
            motor.abrir().execute(
                AbrirTicketInputDTO(cliente_id=cliente.id, personas=1, tarifa_id=tarifa.id),
                operador,
            )
            for _ in range(competidores)
        ]
        servicios = [motor.agregar_servicio() for _ in tickets]

        resultados = self._en_paralelo(*[
            (lambda s=s, t=t: s.execute(AgregarServicioInputDTO(t.id, casco.id, 1), operador))
            for s, t in zip(servicios, tickets)
        ])

        errores = [r for r in resultados if isinstance(r, Exception)]
        assert len(errores) == competidores - 1
        assert all(isinstance(e, InsufficientStockError) for e in errores)
        assert servicio_repo.get_by_id(casco.id).stock_actual == 0
        lineas = [len(ticket_repo.get_by_id(t.id).servicios) for t in tickets]
        assert sorted(lineas) == [0] * (competidores - 1) + [1]

    def test_stock_consistente_con_lineas(
        self, motor, abierto, casco, operador, servicio_repo, ticket_repo
    ):
        """Una escritura perdida devuelve su reserva: stock + líneas = inicial."""
        servicios = [motor.agregar_servicio() for _ in range(3)]

        resultados = self._en_paralelo(*[
            (lambda s=s: s.execute(AgregarServicioInputDTO(abierto.id, casco.id, 1), operador))
            for s in servicios
        ])

        for r in resultados:
            assert not isinstance(r, Exception) or isinstance(r, ConcurrencyError)
        lineas = ticket_repo.get_by_id(abierto.id).servicios
        assert servicio_repo.get_by_id(casco.id).stock_actual + len(lineas) == 5
