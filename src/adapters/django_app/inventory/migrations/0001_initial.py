"""
Migration inicial del dominio de Inventario.

Crea la tabla:
- servicios
"""

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='ServicioModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('nombre', models.CharField(max_length=200)),
                ('precio', models.DecimalField(max_digits=10, decimal_places=2)),
                ('tipo_costo', models.CharField(
                    max_length=20,
                    choices=[
                        ('fijo', 'Fijo'),
                        ('por_tiempo', 'Por tiempo'),
                        ('paquete', 'Paquete'),
                    ],
                    default='fijo'
                )),
                ('requiere_inventario', models.BooleanField(default=False)),
                ('stock_actual', models.IntegerField(null=True, blank=True)),
                ('maximo_por_ticket', models.PositiveIntegerField(null=True, blank=True)),
                ('activo', models.BooleanField(default=True, db_index=True)),
            ],
            options={
                'db_table': 'servicios',
                'ordering': ['nombre'],
            },
        ),
        migrations.AddConstraint(
            model_name='serviciomodel',
            constraint=models.CheckConstraint(
                check=models.Q(stock_actual__isnull=True) | models.Q(stock_actual__gte=0),
                name='servicio_stock_no_negativo',
            ),
        ),
    ]
