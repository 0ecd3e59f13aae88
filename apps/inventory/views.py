from rest_framework import viewsets, mixins
from rest_framework.permissions import IsAuthenticated
from rest_framework.pagination import PageNumberPagination

from apps.accounts.permissions import IsLendingAdmin

from .models import Kit, KitComponent
from .serializers import (
    KitSerializer,
    KitListSerializer,
    KitComponentSerializer,
    KitComponentHistorySerializer,
    KitFilterSerializer,
    ComponentFilterSerializer,
    HistoryFilterSerializer,
)
from .services import list_history


class InventoryPagination(PageNumberPagination):
    """Custom pagination for inventory listings."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class KitViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only catalog of kits. Kits are edited in Django admin.

    list: Get all kits (filter by status, kit_type, search)
    retrieve: Get a kit with its bundled components
    """

    queryset = Kit.objects.prefetch_related('components')
    serializer_class = KitSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = InventoryPagination

    def get_queryset(self):
        """Filter kits using input serializer validation."""
        queryset = super().get_queryset()

        filter_serializer = KitFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if 'status' in params:
            queryset = queryset.filter(status=params['status'])
        if 'kit_type' in params:
            queryset = queryset.filter(kit_type=params['kit_type'])
        if params.get('search'):
            queryset = queryset.filter(kit_name__icontains=params['search'])

        return queryset

    def get_serializer_class(self):
        if self.action == 'list':
            return KitListSerializer
        return KitSerializer


class KitComponentViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only catalog of components.

    list: Get components (filter by kit, global_only, search)
    retrieve: Get a specific component
    """

    queryset = KitComponent.objects.all()
    serializer_class = KitComponentSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = InventoryPagination

    def get_queryset(self):
        queryset = super().get_queryset()

        filter_serializer = ComponentFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if params.get('kit'):
            queryset = queryset.filter(kit_id=params['kit'])
        if params.get('global_only'):
            queryset = queryset.filter(kit__isnull=True)
        if params.get('search'):
            queryset = queryset.filter(component_name__icontains=params['search'])

        return queryset


class KitComponentHistoryViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Inventory movement log (administrators only).

    list: Get history entries, newest first
    """

    serializer_class = KitComponentHistorySerializer
    permission_classes = [IsAuthenticated, IsLendingAdmin]
    pagination_class = InventoryPagination

    def get_queryset(self):
        filter_serializer = HistoryFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        return list_history(
            kit_id=params.get('kit'),
            component_id=params.get('component'),
            borrow_request_id=params.get('borrow_request'),
        )
