from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class RequestType(models.TextChoices):
    BORROW_KIT = 'BORROW_KIT', 'Borrow kit'
    BORROW_COMPONENT = 'BORROW_COMPONENT', 'Borrow components'


class BorrowingStatus(models.TextChoices):
    PENDING_APPROVAL = 'PENDING_APPROVAL', 'Pending approval'
    APPROVED = 'APPROVED', 'Approved'
    REJECTED = 'REJECTED', 'Rejected'
    RETURNED = 'RETURNED', 'Returned'


# Every status change must appear here
ALLOWED_TRANSITIONS = {
    BorrowingStatus.PENDING_APPROVAL: (BorrowingStatus.APPROVED, BorrowingStatus.REJECTED),
    BorrowingStatus.APPROVED: (BorrowingStatus.RETURNED,),
    BorrowingStatus.REJECTED: (),
    BorrowingStatus.RETURNED: (),
}


LEGACY_BORROWING_STATUSES = {
    'PENDING': BorrowingStatus.PENDING_APPROVAL,
    'PENDING_APPROVAL': BorrowingStatus.PENDING_APPROVAL,
    'WAITING': BorrowingStatus.PENDING_APPROVAL,
    'APPROVED': BorrowingStatus.APPROVED,
    'BORROWED': BorrowingStatus.APPROVED,
    'IN_USE': BorrowingStatus.APPROVED,
    'REJECTED': BorrowingStatus.REJECTED,
    'DECLINED': BorrowingStatus.REJECTED,
    'RETURNED': BorrowingStatus.RETURNED,
    'COMPLETED': BorrowingStatus.RETURNED,
}


def normalize_borrowing_status(value):
    """
    Map a raw request status onto BorrowingStatus.

    Raises:
        ValueError: If the value is not a known status.
    """
    if isinstance(value, str):
        key = value.strip().upper().replace('-', '_').replace(' ', '_')
        if key in LEGACY_BORROWING_STATUSES:
            return LEGACY_BORROWING_STATUSES[key]
    raise ValueError(f"Unknown borrowing status: {value!r}")


class BorrowingRequest(models.Model):
    """
    Request to borrow a kit or a set of global components.

    Requests are never deleted; their status only moves along
    ALLOWED_TRANSITIONS.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    request_type = models.CharField(max_length=20, choices=RequestType.choices)
    requested_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='borrowing_requests'
    )

    # Kit path; component path uses BorrowingRequestComponent rows
    kit = models.ForeignKey(
        'inventory.Kit',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='borrowing_requests'
    )

    # Fixed at creation, never renegotiated
    deposit_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    reason = models.TextField()
    expect_return_date = models.DateTimeField()
    actual_return_date = models.DateTimeField(null=True, blank=True)
    is_late = models.BooleanField(default=False)

    status = models.CharField(
        max_length=20,
        choices=BorrowingStatus.choices,
        default=BorrowingStatus.PENDING_APPROVAL
    )

    # Decision audit
    decided_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='borrowing_decisions'
    )
    decided_at = models.DateTimeField(null=True, blank=True)
    decision_note = models.TextField(blank=True)
    inspected_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='borrowing_inspections'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'borrowing_requests'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='borrowing_status_idx'),
            models.Index(fields=['requested_by', 'status'], name='borrowing_requester_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(request_type=RequestType.BORROW_KIT, kit__isnull=False)
                    | models.Q(request_type=RequestType.BORROW_COMPONENT, kit__isnull=True)
                ),
                name='borrowing_kit_matches_type',
            ),
            models.CheckConstraint(
                condition=models.Q(deposit_amount__gte=0),
                name='borrowing_deposit_non_negative',
            ),
        ]

    def __str__(self):
        return f"{self.get_request_type_display()} by {self.requested_by_id} ({self.status})"

    def can_transition_to(self, status):
        return status in ALLOWED_TRANSITIONS.get(self.status, ())

    @property
    def is_kit_request(self):
        return self.request_type == RequestType.BORROW_KIT


class BorrowingRequestComponent(models.Model):
    """One requested component line, with price snapshot at creation."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    request = models.ForeignKey(
        BorrowingRequest,
        on_delete=models.CASCADE,
        related_name='components'
    )
    kit_component = models.ForeignKey(
        'inventory.KitComponent',
        on_delete=models.PROTECT,
        related_name='request_lines'
    )
    component_name = models.CharField(max_length=200)
    unit_price = models.DecimalField(max_digits=14, decimal_places=2)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    position = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'borrowing_request_components'
        ordering = ['position']
        constraints = [
            models.UniqueConstraint(
                fields=['request', 'kit_component'],
                name='unique_component_per_request',
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name='request_component_quantity_positive',
            ),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.component_name}"

    @property
    def line_total(self):
        return self.unit_price * self.quantity
