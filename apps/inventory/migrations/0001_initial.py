# Generated manually for the inventory ledger

import uuid
from decimal import Decimal
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


KIT_STATUS_CHOICES = [
    ('AVAILABLE', 'Available'),
    ('IN_USE', 'In use'),
    ('MAINTENANCE', 'Maintenance'),
    ('DAMAGED', 'Damaged'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Kit',
            fields=[
                ('quantity_total', models.PositiveIntegerField(default=1)),
                ('quantity_available', models.PositiveIntegerField(default=1)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('kit_name', models.CharField(max_length=200)),
                ('kit_type', models.CharField(choices=[('STUDENT_KIT', 'Student kit'), ('LECTURER_KIT', 'Lecturer kit')], default='STUDENT_KIT', max_length=20)),
                ('status', models.CharField(choices=KIT_STATUS_CHOICES, default='AVAILABLE', max_length=20)),
                ('amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14, validators=[MinValueValidator(Decimal('0.00'))])),
                ('description', models.TextField(blank=True)),
                ('image_url', models.URLField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'kits',
                'ordering': ['kit_name'],
                'indexes': [
                    models.Index(fields=['status'], name='kits_status_idx'),
                    models.Index(fields=['kit_type'], name='kits_type_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('quantity_available__lte', models.F('quantity_total'))), name='kit_available_lte_total'),
                ],
            },
        ),
        migrations.CreateModel(
            name='KitComponent',
            fields=[
                ('quantity_total', models.PositiveIntegerField(default=1)),
                ('quantity_available', models.PositiveIntegerField(default=1)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('component_name', models.CharField(max_length=200)),
                ('component_type', models.CharField(blank=True, max_length=100)),
                ('status', models.CharField(choices=KIT_STATUS_CHOICES, default='AVAILABLE', max_length=20)),
                ('price_per_unit', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14, validators=[MinValueValidator(Decimal('0.00'))])),
                ('description', models.TextField(blank=True)),
                ('image_url', models.URLField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('kit', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='components', to='inventory.kit')),
            ],
            options={
                'db_table': 'kit_components',
                'ordering': ['component_name'],
                'indexes': [
                    models.Index(fields=['kit'], name='kit_components_kit_idx'),
                    models.Index(fields=['component_name'], name='kit_components_name_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('quantity_available__lte', models.F('quantity_total'))), name='component_available_lte_total'),
                ],
            },
        ),
        migrations.CreateModel(
            name='KitComponentHistory',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('action', models.CharField(choices=[('RESERVED', 'Reserved'), ('RELEASED', 'Released'), ('DAMAGED', 'Damaged')], max_length=20)),
                ('quantity', models.PositiveIntegerField()),
                ('borrow_request_id', models.UUIDField(blank=True, db_index=True, null=True)),
                ('note', models.CharField(blank=True, max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('kit', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='history', to='inventory.kit')),
                ('kit_component', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='history', to='inventory.kitcomponent')),
            ],
            options={
                'db_table': 'kit_component_history',
                'ordering': ['-created_at'],
                'verbose_name_plural': 'Kit component history',
            },
        ),
    ]
