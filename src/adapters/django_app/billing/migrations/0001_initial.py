"""
Migration inicial del dominio de Facturación.

Crea las tablas:
- tarifas_hora
- clientes
"""

from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='TarifaModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('nombre', models.CharField(max_length=100)),
                ('precio_por_hora', models.DecimalField(max_digits=10, decimal_places=2)),
                ('minutos_minimos', models.PositiveIntegerField(default=60)),
                ('tipo_redondeo', models.CharField(
                    max_length=20,
                    choices=[
                        ('arriba', 'Arriba'),
                        ('abajo', 'Abajo'),
                        ('estandar', 'Estándar'),
                    ],
                    default='arriba'
                )),
                ('activo', models.BooleanField(default=True, db_index=True)),
                ('aplicable_desde', models.TimeField(null=True, blank=True)),
                ('aplicable_hasta', models.TimeField(null=True, blank=True)),
                ('bloque_minutos', models.PositiveIntegerField(null=True, blank=True)),
                ('gracia_minutos', models.PositiveIntegerField(null=True, blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, db_index=True)),
            ],
            options={
                'db_table': 'tarifas_hora',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ClienteModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('codigo', models.CharField(max_length=50, unique=True)),
                ('nombre', models.CharField(max_length=200)),
                ('membresia', models.CharField(
                    max_length=20,
                    choices=[
                        ('ninguna', 'Ninguna'),
                        ('basica', 'Básica'),
                        ('premium', 'Premium'),
                        ('vip', 'VIP'),
                    ],
                    default='ninguna'
                )),
                ('descuento_porcentaje', models.DecimalField(max_digits=5, decimal_places=2, default=0)),
            ],
            options={
                'db_table': 'clientes',
                'ordering': ['nombre'],
            },
        ),
    ]
