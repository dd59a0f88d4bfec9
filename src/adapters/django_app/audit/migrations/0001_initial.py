"""
Migration inicial de Auditoría.

Crea la tabla:
- registros_auditoria
"""

import django.core.serializers.json
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='RegistroAuditoriaModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False, editable=False)),
                ('actor_id', models.CharField(max_length=100)),
                ('accion', models.CharField(max_length=50, db_index=True)),
                ('entidad', models.CharField(max_length=50)),
                ('entidad_id', models.CharField(max_length=36, db_index=True)),
                ('detalle', models.JSONField(
                    default=dict,
                    encoder=django.core.serializers.json.DjangoJSONEncoder
                )),
                ('registrado_en', models.DateTimeField()),
            ],
            options={
                'db_table': 'registros_auditoria',
                'ordering': ['registrado_en'],
            },
        ),
    ]
