from decimal import Decimal
from rest_framework import serializers

from apps.penalties.models import PolicyType
from .context import resolve_context
from .models import BorrowingRequest, BorrowingRequestComponent, BorrowingStatus, RequestType


class BorrowingRequestComponentSerializer(serializers.ModelSerializer):
    """Serializer for requested component lines."""

    line_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = BorrowingRequestComponent
        fields = [
            'kit_component',
            'component_name',
            'unit_price',
            'quantity',
            'line_total',
        ]


class BorrowingRequestSerializer(serializers.ModelSerializer):
    """Main serializer for borrowing requests."""

    requested_by_email = serializers.EmailField(source='requested_by.email', read_only=True)
    kit_name = serializers.CharField(source='kit.kit_name', read_only=True, default=None)
    components = BorrowingRequestComponentSerializer(many=True, read_only=True)

    class Meta:
        model = BorrowingRequest
        fields = [
            'id',
            'request_type',
            'requested_by',
            'requested_by_email',
            'kit',
            'kit_name',
            'components',
            'deposit_amount',
            'reason',
            'expect_return_date',
            'actual_return_date',
            'is_late',
            'status',
            'decided_by',
            'decided_at',
            'decision_note',
            'inspected_by',
            'created_at',
            'updated_at',
        ]


class BorrowingRequestListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    kit_name = serializers.CharField(source='kit.kit_name', read_only=True, default=None)

    class Meta:
        model = BorrowingRequest
        fields = [
            'id',
            'request_type',
            'requested_by',
            'kit_name',
            'deposit_amount',
            'expect_return_date',
            'status',
            'created_at',
        ]


class BorrowingRequestInspectionSerializer(BorrowingRequestSerializer):
    """Request details for inspectors, with the borrower's group/class context."""

    borrower_context = serializers.SerializerMethodField()

    class Meta(BorrowingRequestSerializer.Meta):
        fields = BorrowingRequestSerializer.Meta.fields + ['borrower_context']

    def get_borrower_context(self, obj) -> dict:
        return resolve_context(obj.requested_by)


class ReturnOutcomeSerializer(serializers.Serializer):
    request = BorrowingRequestSerializer()
    fine_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    refund_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    penalty_id = serializers.UUIDField(allow_null=True)


class ErrorSerializer(serializers.Serializer):
    """Standard error response serializer."""
    error = serializers.CharField()


# =============================================================================
# Input serializers
# =============================================================================

class ComponentLineInputSerializer(serializers.Serializer):
    component_id = serializers.UUIDField()
    quantity = serializers.IntegerField()


class BorrowingRequestCreateSerializer(serializers.Serializer):
    """
    Validate input for creating a borrowing request.

    Business rules (availability, balance, dates) are checked by the
    lifecycle service.
    """

    request_type = serializers.ChoiceField(choices=RequestType.choices)
    kit = serializers.UUIDField(required=False, allow_null=True)
    components = ComponentLineInputSerializer(many=True, required=False)
    reason = serializers.CharField(allow_blank=True)
    expect_return_date = serializers.DateTimeField()


class DecisionInputSerializer(serializers.Serializer):
    """Validate input for approving or rejecting a request."""

    note = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')


class DamageEntrySerializer(serializers.Serializer):
    """One component entry of an inspection."""

    damaged = serializers.BooleanField()
    quantity = serializers.IntegerField(min_value=0, required=False, default=1)
    unit_value = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True
    )
    description = serializers.CharField(max_length=500, required=False, allow_blank=True)
    damage_type = serializers.ChoiceField(
        choices=[PolicyType.DAMAGED, PolicyType.LOST],
        required=False,
        default=PolicyType.DAMAGED
    )
    image_url = serializers.URLField(max_length=500, required=False, allow_blank=True)


class InspectInputSerializer(serializers.Serializer):
    """Validate input for a return inspection."""

    damage_assessment = serializers.DictField(
        child=DamageEntrySerializer(), required=False, default=dict
    )
    note = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')


class RequestFilterSerializer(serializers.Serializer):
    """Validate query parameters for request listing."""

    status = serializers.ChoiceField(choices=BorrowingStatus.choices, required=False)
