# Generated manually for penalties and policies

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


POLICY_TYPE_CHOICES = [
    ('damaged', 'Damaged'),
    ('lost', 'Lost'),
    ('lated', 'Late return'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('borrowing', '0001_initial'),
        ('inventory', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PenaltyPolicy',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('policy_name', models.CharField(max_length=200)),
                ('policy_type', models.CharField(choices=POLICY_TYPE_CHOICES, max_length=20)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14, validators=[MinValueValidator(Decimal('0.00'))])),
                ('issued_date', models.DateTimeField(blank=True, null=True)),
                ('resolved', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'penalty_policies',
                'ordering': ['policy_type', '-issued_date'],
                'verbose_name_plural': 'Penalty policies',
            },
        ),
        migrations.CreateModel(
            name='Penalty',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('penalty_type', models.CharField(choices=POLICY_TYPE_CHOICES, default='damaged', max_length=20)),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('settled_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('resolved', models.BooleanField(default=False)),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('take_effect_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('semester', models.CharField(blank=True, max_length=20)),
                ('note', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('borrow_request', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='penalties', to='borrowing.borrowingrequest')),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='penalties', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'penalties',
                'ordering': ['-take_effect_date'],
                'indexes': [
                    models.Index(fields=['account', 'resolved'], name='penalties_account_idx'),
                    models.Index(fields=['resolved'], name='penalties_resolved_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('settled_amount__lte', models.F('total_amount'))), name='penalty_settled_lte_total'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PenaltyDetail',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('description', models.CharField(max_length=500)),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('image_url', models.URLField(blank=True, max_length=500, null=True)),
                ('position', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('penalty', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='details', to='penalties.penalty')),
                ('policy', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='details', to='penalties.penaltypolicy')),
                ('kit_component', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='penalty_details', to='inventory.kitcomponent')),
            ],
            options={
                'db_table': 'penalty_details',
                'ordering': ['position'],
            },
        ),
    ]
