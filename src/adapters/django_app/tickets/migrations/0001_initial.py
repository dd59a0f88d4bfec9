"""
Migration inicial del dominio de Tickets.

Crea las tablas:
- tickets
- ticket_pausas
- ticket_servicios
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):
    """Migration inicial."""

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='TicketModel',
            fields=[
                ('id', models.CharField(
                    max_length=36,
                    primary_key=True,
                    serialize=False,
                    editable=False,
                    help_text='UUID único del ticket'
                )),
                ('codigo', models.CharField(
                    max_length=32,
                    unique=True,
                    help_text='Código legible (TK-YYYYMMDD-XXXXXX)'
                )),
                ('cliente_id', models.CharField(
                    max_length=36,
                    db_index=True,
                    help_text='ID del cliente'
                )),
                ('personas', models.PositiveIntegerField(
                    default=1,
                    help_text='Número de personas'
                )),
                ('tarifa_id', models.CharField(
                    max_length=36,
                    help_text='Tarifa fijada al abrir el ticket'
                )),
                ('notas', models.TextField(null=True, blank=True)),
                ('estado', models.CharField(
                    max_length=20,
                    choices=[
                        ('activo', 'Activo'),
                        ('pausado', 'Pausado'),
                        ('cerrado', 'Cerrado'),
                        ('cancelado', 'Cancelado'),
                    ],
                    default='activo',
                    db_index=True,
                    help_text='Estado actual del ticket'
                )),
                ('version', models.PositiveIntegerField(
                    default=0,
                    help_text='Contador de compare-and-set'
                )),
                ('hora_entrada', models.DateTimeField(
                    default=django.utils.timezone.now,
                    db_index=True
                )),
                ('hora_salida', models.DateTimeField(null=True, blank=True)),
                ('operador_entrada_id', models.CharField(max_length=100)),
                ('operador_salida_id', models.CharField(max_length=100, null=True, blank=True)),
                ('minutos_cobrados', models.PositiveIntegerField(null=True, blank=True)),
                ('monto_tiempo', models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)),
                ('descuento_porcentaje', models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)),
                ('monto_descuento', models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)),
                ('monto_servicios', models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)),
                ('monto_total', models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)),
                ('metodo_pago', models.CharField(
                    max_length=20,
                    choices=[
                        ('efectivo', 'Efectivo'),
                        ('tarjeta', 'Tarjeta'),
                        ('transferencia', 'Transferencia'),
                        ('otro', 'Otro'),
                    ],
                    null=True,
                    blank=True
                )),
                ('motivo_cancelacion', models.TextField(null=True, blank=True)),
                ('actualizado_en', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Ticket',
                'verbose_name_plural': 'Tickets',
                'db_table': 'tickets',
                'ordering': ['-hora_entrada'],
            },
        ),
        migrations.AddIndex(
            model_name='ticketmodel',
            index=models.Index(fields=['estado', 'hora_entrada'], name='idx_ticket_estado_entrada'),
        ),
        migrations.CreateModel(
            name='PausaModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('inicio', models.DateTimeField()),
                ('fin', models.DateTimeField(null=True, blank=True)),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='pausas',
                    to='tickets.ticketmodel'
                )),
            ],
            options={
                'db_table': 'ticket_pausas',
                'ordering': ['inicio'],
            },
        ),
        migrations.CreateModel(
            name='TicketServicioModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('servicio_id', models.CharField(max_length=36, db_index=True)),
                ('servicio_nombre', models.CharField(max_length=200)),
                ('cantidad', models.PositiveIntegerField()),
                ('precio_unitario', models.DecimalField(max_digits=10, decimal_places=2)),
                ('monto_total', models.DecimalField(max_digits=10, decimal_places=2)),
                ('controla_inventario', models.BooleanField(default=False)),
                ('agregado_en', models.DateTimeField()),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='servicios',
                    to='tickets.ticketmodel'
                )),
            ],
            options={
                'db_table': 'ticket_servicios',
                'ordering': ['agregado_en'],
            },
        ),
    ]
