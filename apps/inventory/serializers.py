from rest_framework import serializers
from .models import Kit, KitComponent, KitComponentHistory, KitStatus, KitType


class KitComponentSerializer(serializers.ModelSerializer):
    """Serializer for kit components (global or bundled)."""

    is_global = serializers.BooleanField(read_only=True)

    class Meta:
        model = KitComponent
        fields = [
            'id',
            'kit',
            'component_name',
            'component_type',
            'status',
            'quantity_total',
            'quantity_available',
            'price_per_unit',
            'description',
            'image_url',
            'is_global',
            'created_at',
            'updated_at',
        ]


class KitSerializer(serializers.ModelSerializer):
    """Main serializer for kits, including bundled components."""

    components = KitComponentSerializer(many=True, read_only=True)
    is_rentable = serializers.BooleanField(read_only=True)

    class Meta:
        model = Kit
        fields = [
            'id',
            'kit_name',
            'kit_type',
            'status',
            'quantity_total',
            'quantity_available',
            'amount',
            'description',
            'image_url',
            'is_rentable',
            'components',
            'created_at',
            'updated_at',
        ]


class KitListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    class Meta:
        model = Kit
        fields = [
            'id',
            'kit_name',
            'kit_type',
            'status',
            'quantity_available',
            'amount',
        ]


class KitComponentHistorySerializer(serializers.ModelSerializer):
    """Serializer for inventory movement history."""

    kit_name = serializers.CharField(source='kit.kit_name', read_only=True, default=None)
    component_name = serializers.CharField(
        source='kit_component.component_name', read_only=True, default=None
    )

    class Meta:
        model = KitComponentHistory
        fields = [
            'id',
            'action',
            'quantity',
            'kit',
            'kit_name',
            'kit_component',
            'component_name',
            'borrow_request_id',
            'note',
            'created_at',
        ]


# =============================================================================
# Input serializers
# =============================================================================

class KitFilterSerializer(serializers.Serializer):
    """Validate query parameters for kit listing."""

    status = serializers.ChoiceField(choices=KitStatus.choices, required=False)
    kit_type = serializers.ChoiceField(choices=KitType.choices, required=False)
    search = serializers.CharField(required=False, max_length=200)


class ComponentFilterSerializer(serializers.Serializer):
    """Validate query parameters for component listing."""

    kit = serializers.UUIDField(required=False)
    global_only = serializers.BooleanField(required=False, default=False)
    search = serializers.CharField(required=False, max_length=200)


class HistoryFilterSerializer(serializers.Serializer):
    """Validate query parameters for history listing."""

    kit = serializers.UUIDField(required=False)
    component = serializers.UUIDField(required=False)
    borrow_request = serializers.UUIDField(required=False)
