from rest_framework import serializers
from .models import Penalty, PenaltyDetail, PenaltyPolicy


class PenaltyPolicySerializer(serializers.ModelSerializer):
    """Serializer for penalty policies (reference data)."""

    class Meta:
        model = PenaltyPolicy
        fields = [
            'id',
            'policy_name',
            'policy_type',
            'amount',
            'issued_date',
            'resolved',
        ]


class PenaltyDetailSerializer(serializers.ModelSerializer):
    """Serializer for penalty lines."""

    policy_name = serializers.CharField(source='policy.policy_name', read_only=True, default=None)
    component_name = serializers.CharField(
        source='kit_component.component_name', read_only=True, default=None
    )

    class Meta:
        model = PenaltyDetail
        fields = [
            'id',
            'description',
            'quantity',
            'amount',
            'policy',
            'policy_name',
            'kit_component',
            'component_name',
            'image_url',
        ]


class PenaltySerializer(serializers.ModelSerializer):
    """Main serializer for penalties."""

    details = PenaltyDetailSerializer(many=True, read_only=True)
    account_email = serializers.EmailField(source='account.email', read_only=True)
    outstanding_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Penalty
        fields = [
            'id',
            'borrow_request',
            'account',
            'account_email',
            'penalty_type',
            'total_amount',
            'settled_amount',
            'outstanding_amount',
            'resolved',
            'resolved_at',
            'take_effect_date',
            'semester',
            'note',
            'details',
        ]


class ErrorSerializer(serializers.Serializer):
    """Standard error response serializer."""
    error = serializers.CharField()


# =============================================================================
# Input serializers
# =============================================================================

class IssueLatePenaltyInputSerializer(serializers.Serializer):
    """Validate input for issuing a late-return fee."""

    borrow_request = serializers.UUIDField()
    policy = serializers.UUIDField()
    note = serializers.CharField(max_length=1000, required=False, allow_blank=True, default='')


class PenaltyFilterSerializer(serializers.Serializer):
    """Validate query parameters for penalty listing."""

    resolved = serializers.BooleanField(required=False, allow_null=True)
