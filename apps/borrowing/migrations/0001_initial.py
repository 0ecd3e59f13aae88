# Generated manually for the borrowing lifecycle

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('inventory', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='BorrowingRequest',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('request_type', models.CharField(choices=[('BORROW_KIT', 'Borrow kit'), ('BORROW_COMPONENT', 'Borrow components')], max_length=20)),
                ('deposit_amount', models.DecimalField(decimal_places=2, max_digits=14, validators=[MinValueValidator(Decimal('0.00'))])),
                ('reason', models.TextField()),
                ('expect_return_date', models.DateTimeField()),
                ('actual_return_date', models.DateTimeField(blank=True, null=True)),
                ('is_late', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('PENDING_APPROVAL', 'Pending approval'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected'), ('RETURNED', 'Returned')], default='PENDING_APPROVAL', max_length=20)),
                ('decided_at', models.DateTimeField(blank=True, null=True)),
                ('decision_note', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('requested_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='borrowing_requests', to=settings.AUTH_USER_MODEL)),
                ('kit', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='borrowing_requests', to='inventory.kit')),
                ('decided_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='borrowing_decisions', to=settings.AUTH_USER_MODEL)),
                ('inspected_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='borrowing_inspections', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'borrowing_requests',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'created_at'], name='borrowing_status_idx'),
                    models.Index(fields=['requested_by', 'status'], name='borrowing_requester_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(models.Q(('kit__isnull', False), ('request_type', 'BORROW_KIT')), models.Q(('kit__isnull', True), ('request_type', 'BORROW_COMPONENT')), _connector='OR'), name='borrowing_kit_matches_type'),
                    models.CheckConstraint(condition=models.Q(('deposit_amount__gte', 0)), name='borrowing_deposit_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='BorrowingRequestComponent',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('component_name', models.CharField(max_length=200)),
                ('unit_price', models.DecimalField(decimal_places=2, max_digits=14)),
                ('quantity', models.PositiveIntegerField(validators=[MinValueValidator(1)])),
                ('position', models.PositiveIntegerField(default=0)),
                ('request', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='components', to='borrowing.borrowingrequest')),
                ('kit_component', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='request_lines', to='inventory.kitcomponent')),
            ],
            options={
                'db_table': 'borrowing_request_components',
                'ordering': ['position'],
                'constraints': [
                    models.UniqueConstraint(fields=('request', 'kit_component'), name='unique_component_per_request'),
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 1)), name='request_component_quantity_positive'),
                ],
            },
        ),
    ]
