from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid


class PolicyType(models.TextChoices):
    DAMAGED = 'damaged', 'Damaged'
    LOST = 'lost', 'Lost'
    LATED = 'lated', 'Late return'


class PenaltyPolicy(models.Model):
    """
    Named penalty category with a nominal amount.

    Reference data maintained in Django admin. A policy applies from
    ``issued_date`` until ``resolved`` (either may be empty).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    policy_name = models.CharField(max_length=200)
    policy_type = models.CharField(max_length=20, choices=PolicyType.choices)
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    issued_date = models.DateTimeField(null=True, blank=True)
    resolved = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'penalty_policies'
        ordering = ['policy_type', '-issued_date']
        verbose_name_plural = 'Penalty policies'

    def __str__(self):
        return f"{self.policy_name} ({self.policy_type})"

    def is_active(self, at=None):
        at = at or timezone.now()
        started = self.issued_date is None or self.issued_date <= at
        ended = self.resolved is not None and self.resolved <= at
        return started and not ended


class Penalty(models.Model):
    """Fine raised against a returned borrow request."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    borrow_request = models.ForeignKey(
        'borrowing.BorrowingRequest',
        on_delete=models.PROTECT,
        related_name='penalties'
    )
    account = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='penalties'
    )
    penalty_type = models.CharField(
        max_length=20,
        choices=PolicyType.choices,
        default=PolicyType.DAMAGED
    )

    # Always equals the sum of detail amounts
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)

    # Covered by the deposit at return or paid later from the wallet
    settled_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00')
    )
    resolved = models.BooleanField(default=False)
    resolved_at = models.DateTimeField(null=True, blank=True)

    take_effect_date = models.DateTimeField(default=timezone.now)
    semester = models.CharField(max_length=20, blank=True)
    note = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'penalties'
        ordering = ['-take_effect_date']
        indexes = [
            models.Index(fields=['account', 'resolved'], name='penalties_account_idx'),
            models.Index(fields=['resolved'], name='penalties_resolved_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(settled_amount__lte=models.F('total_amount')),
                name='penalty_settled_lte_total',
            ),
        ]

    def __str__(self):
        return f"Penalty {self.total_amount} for {self.borrow_request_id}"

    @property
    def outstanding_amount(self):
        """Return the unpaid part of the fine."""
        return max(Decimal('0.00'), self.total_amount - self.settled_amount)


class PenaltyDetail(models.Model):
    """One line of a penalty, usually one damaged component."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    penalty = models.ForeignKey(
        Penalty,
        on_delete=models.CASCADE,
        related_name='details'
    )

    # Descriptive only; the amount comes from the assessment
    policy = models.ForeignKey(
        PenaltyPolicy,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='details'
    )
    kit_component = models.ForeignKey(
        'inventory.KitComponent',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='penalty_details'
    )
    description = models.CharField(max_length=500)
    quantity = models.PositiveIntegerField(default=1)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    image_url = models.URLField(max_length=500, null=True, blank=True)
    position = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'penalty_details'
        ordering = ['position']

    def __str__(self):
        return f"{self.description}: {self.amount}"
