from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class KitStatus(models.TextChoices):
    AVAILABLE = 'AVAILABLE', 'Available'
    IN_USE = 'IN_USE', 'In use'
    MAINTENANCE = 'MAINTENANCE', 'Maintenance'
    DAMAGED = 'DAMAGED', 'Damaged'


class KitType(models.TextChoices):
    STUDENT_KIT = 'STUDENT_KIT', 'Student kit'
    LECTURER_KIT = 'LECTURER_KIT', 'Lecturer kit'


class HistoryAction(models.TextChoices):
    RESERVED = 'RESERVED', 'Reserved'
    RELEASED = 'RELEASED', 'Released'
    DAMAGED = 'DAMAGED', 'Damaged'


# Values written by older clients, mapped onto KitStatus
LEGACY_KIT_STATUSES = {
    'AVAILABLE': KitStatus.AVAILABLE,
    'ACTIVE': KitStatus.AVAILABLE,
    'IN_USE': KitStatus.IN_USE,
    'INUSE': KitStatus.IN_USE,
    'BORROWED': KitStatus.IN_USE,
    'MAINTENANCE': KitStatus.MAINTENANCE,
    'INACTIVE': KitStatus.MAINTENANCE,
    'DAMAGED': KitStatus.DAMAGED,
}


def normalize_kit_status(value):
    """
    Map a raw kit status onto KitStatus.

    Accepts enum members, any casing of the known names, and booleans
    (``True`` is available, ``False`` is maintenance).

    Raises:
        ValueError: If the value is not a known status.
    """
    if isinstance(value, bool):
        return KitStatus.AVAILABLE if value else KitStatus.MAINTENANCE
    if isinstance(value, str):
        key = value.strip().upper().replace('-', '_').replace(' ', '_')
        if key in LEGACY_KIT_STATUSES:
            return LEGACY_KIT_STATUSES[key]
    raise ValueError(f"Unknown kit status: {value!r}")


class StockedItem(models.Model):
    """Shared availability counters for kits and components."""

    quantity_total = models.PositiveIntegerField(default=1)
    quantity_available = models.PositiveIntegerField(default=1)

    class Meta:
        abstract = True

    def is_in_stock(self, quantity=1):
        return self.quantity_available >= quantity


class Kit(StockedItem):
    """A lendable bundle of components with an admin-set deposit."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    kit_name = models.CharField(max_length=200)
    kit_type = models.CharField(
        max_length=20,
        choices=KitType.choices,
        default=KitType.STUDENT_KIT
    )
    status = models.CharField(
        max_length=20,
        choices=KitStatus.choices,
        default=KitStatus.AVAILABLE
    )

    # Deposit charged per rental
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    description = models.TextField(blank=True)
    image_url = models.URLField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'kits'
        ordering = ['kit_name']
        indexes = [
            models.Index(fields=['status'], name='kits_status_idx'),
            models.Index(fields=['kit_type'], name='kits_type_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity_available__lte=models.F('quantity_total')),
                name='kit_available_lte_total',
            ),
        ]

    def __str__(self):
        return f"{self.kit_name} ({self.quantity_available}/{self.quantity_total})"

    @property
    def is_rentable(self):
        return self.status == KitStatus.AVAILABLE and self.quantity_available >= 1


class KitComponent(StockedItem):
    """
    A component with its own stock.

    Components without a kit are global and rented individually.
    Components attached to a kit travel with it and are not
    separately rentable.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    kit = models.ForeignKey(
        Kit,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='components'
    )
    component_name = models.CharField(max_length=200)
    component_type = models.CharField(max_length=100, blank=True)
    status = models.CharField(
        max_length=20,
        choices=KitStatus.choices,
        default=KitStatus.AVAILABLE
    )
    price_per_unit = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    description = models.TextField(blank=True)
    image_url = models.URLField(max_length=500, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'kit_components'
        ordering = ['component_name']
        indexes = [
            models.Index(fields=['kit'], name='kit_components_kit_idx'),
            models.Index(fields=['component_name'], name='kit_components_name_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity_available__lte=models.F('quantity_total')),
                name='component_available_lte_total',
            ),
        ]

    def __str__(self):
        return self.component_name

    @property
    def is_global(self):
        return self.kit_id is None


class KitComponentHistory(models.Model):
    """Append-only log of inventory movements."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    action = models.CharField(max_length=20, choices=HistoryAction.choices)
    quantity = models.PositiveIntegerField()
    kit = models.ForeignKey(
        Kit,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='history'
    )
    kit_component = models.ForeignKey(
        KitComponent,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='history'
    )
    borrow_request_id = models.UUIDField(null=True, blank=True, db_index=True)
    note = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'kit_component_history'
        ordering = ['-created_at']
        verbose_name_plural = 'Kit component history'

    def __str__(self):
        target = self.kit or self.kit_component
        return f"{self.action} {self.quantity} x {target}"
