from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsLendingAdmin
from apps.penalties.services import InvalidDamageAssessmentError

from .models import BorrowingRequest, BorrowingStatus
from .serializers import (
    BorrowingRequestSerializer,
    BorrowingRequestListSerializer,
    BorrowingRequestInspectionSerializer,
    BorrowingRequestCreateSerializer,
    DecisionInputSerializer,
    InspectInputSerializer,
    RequestFilterSerializer,
    ReturnOutcomeSerializer,
    ErrorSerializer,
)
from .services import (
    create_borrowing_request,
    approve_borrowing_request,
    reject_borrowing_request,
    inspect_and_return,
    list_requests_for_account,
    list_all_requests,
    list_requests_by_status,
    # Exceptions
    RequestNotFoundError,
    KitNotFoundError,
    ComponentNotFoundError,
    BorrowingValidationError,
    InvalidTransitionError,
    InsufficientInventoryError,
    InsufficientBalanceError,
)


ERROR_STATUS = (
    ((RequestNotFoundError, KitNotFoundError, ComponentNotFoundError), status.HTTP_404_NOT_FOUND),
    ((InvalidTransitionError, InsufficientInventoryError), status.HTTP_409_CONFLICT),
    ((InsufficientBalanceError,), status.HTTP_402_PAYMENT_REQUIRED),
    ((BorrowingValidationError, InvalidDamageAssessmentError), status.HTTP_400_BAD_REQUEST),
)

HANDLED_ERRORS = tuple(exc for group, _ in ERROR_STATUS for exc in group)


def error_response(error):
    """Translate a lifecycle error into an HTTP response."""
    for exceptions, http_status in ERROR_STATUS:
        if isinstance(error, exceptions):
            return Response({'error': str(error)}, status=http_status)
    raise error


class BorrowingRequestPagination(PageNumberPagination):
    """Custom pagination for borrowing requests."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class BorrowingRequestViewSet(mixins.ListModelMixin,
                              mixins.RetrieveModelMixin,
                              mixins.CreateModelMixin,
                              viewsets.GenericViewSet):
    """
    ViewSet for the borrowing request lifecycle.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Own requests (administrators see all; filter by status)
    create: Submit a new request
    retrieve: Get a request
    approve / reject: Decide a pending request (admin)
    inspect: Check in a returned request with a damage assessment (admin)
    pending / approved: Approval and return queues (admin)
    """

    serializer_class = BorrowingRequestSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = BorrowingRequestPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return BorrowingRequest.objects.none()

        filter_serializer = RequestFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        request_status = filter_serializer.validated_data.get('status')

        user = self.request.user
        if user.is_lending_admin:
            return list_all_requests(status=request_status)
        return list_requests_for_account(account_id=user.id, status=request_status)

    def get_serializer_class(self):
        if self.action == 'list':
            return BorrowingRequestListSerializer
        elif self.action == 'create':
            return BorrowingRequestCreateSerializer
        elif getattr(self.request.user, 'is_lending_admin', False):
            return BorrowingRequestInspectionSerializer
        return BorrowingRequestSerializer

    def get_permissions(self):
        if self.action in ['approve', 'reject', 'inspect', 'pending', 'approved']:
            return [IsAuthenticated(), IsLendingAdmin()]
        return [IsAuthenticated()]

    @extend_schema(
        request=BorrowingRequestCreateSerializer,
        responses={201: BorrowingRequestSerializer, 400: ErrorSerializer, 402: ErrorSerializer,
                   404: ErrorSerializer, 409: ErrorSerializer},
    )
    def create(self, request, *args, **kwargs):
        """Submit a borrowing request."""
        serializer = BorrowingRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            borrow_request = create_borrowing_request(
                requested_by=request.user,
                request_type=data['request_type'],
                reason=data['reason'],
                expect_return_date=data['expect_return_date'],
                kit_id=data.get('kit'),
                components=data.get('components'),
            )
        except HANDLED_ERRORS as e:
            return error_response(e)

        output_serializer = BorrowingRequestSerializer(borrow_request)
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(
        request=DecisionInputSerializer,
        responses={200: BorrowingRequestSerializer, 402: ErrorSerializer, 409: ErrorSerializer},
    )
    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        """Approve a pending request: reserve inventory and hold the deposit."""
        serializer = DecisionInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            borrow_request = approve_borrowing_request(
                request_id=pk,
                approver=request.user,
                note=serializer.validated_data['note'],
            )
        except HANDLED_ERRORS as e:
            return error_response(e)

        return Response(BorrowingRequestSerializer(borrow_request).data)

    @extend_schema(
        request=DecisionInputSerializer,
        responses={200: BorrowingRequestSerializer, 409: ErrorSerializer},
    )
    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        """Reject a pending request."""
        serializer = DecisionInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            borrow_request = reject_borrowing_request(
                request_id=pk,
                approver=request.user,
                note=serializer.validated_data['note'],
            )
        except HANDLED_ERRORS as e:
            return error_response(e)

        return Response(BorrowingRequestSerializer(borrow_request).data)

    @extend_schema(
        request=InspectInputSerializer,
        responses={200: ReturnOutcomeSerializer, 400: ErrorSerializer, 409: ErrorSerializer},
    )
    @action(detail=True, methods=['post'])
    def inspect(self, request, pk=None):
        """Check in an approved request with a damage assessment."""
        serializer = InspectInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            outcome = inspect_and_return(
                request_id=pk,
                inspector=request.user,
                damage_assessment=serializer.validated_data['damage_assessment'],
                note=serializer.validated_data['note'],
            )
        except HANDLED_ERRORS as e:
            return error_response(e)

        output_serializer = ReturnOutcomeSerializer({
            'request': outcome.request,
            'fine_amount': outcome.assessment.fine_amount,
            'refund_amount': outcome.refund_amount,
            'penalty_id': outcome.penalty.id if outcome.penalty else None,
        })
        return Response(output_serializer.data)

    @extend_schema(responses={200: BorrowingRequestInspectionSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def pending(self, request):
        """Approval queue, oldest first."""
        return self._queue(request, BorrowingStatus.PENDING_APPROVAL)

    @extend_schema(responses={200: BorrowingRequestInspectionSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def approved(self, request):
        """Return queue: approved requests still out, oldest first."""
        return self._queue(request, BorrowingStatus.APPROVED)

    def _queue(self, request, request_status):
        queryset = list_requests_by_status(status=request_status)
        page = self.paginate_queryset(queryset)
        serializer = BorrowingRequestInspectionSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)
