from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsLendingAdmin, IsOwnerOrLendingAdmin
from apps.borrowing.services.exceptions import RequestNotFoundError
from apps.wallets.services import InsufficientBalanceError

from .models import Penalty
from .serializers import (
    PenaltySerializer,
    PenaltyPolicySerializer,
    IssueLatePenaltyInputSerializer,
    PenaltyFilterSerializer,
    ErrorSerializer,
)
from .services import (
    pay_penalty,
    issue_late_penalty,
    get_active_policies,
    list_penalties_for_account,
    list_unresolved_penalties,
    # Exceptions
    PenaltyNotFoundError,
    PolicyNotFoundError,
    InvalidPolicyError,
    PenaltyAlreadyResolvedError,
    LatePenaltyNotApplicableError,
    InsufficientPermissionsError,
)


class PenaltyPagination(PageNumberPagination):
    """Custom pagination for penalties."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class PenaltyViewSet(mixins.ListModelMixin,
                     mixins.RetrieveModelMixin,
                     viewsets.GenericViewSet):
    """
    ViewSet for penalties.

    list: Own penalties (filter by resolved)
    retrieve: Penalty with details (owner or admin)
    pay: Pay the outstanding amount from the wallet
    unresolved: All unresolved penalties (admin)
    policies: Active penalty policies
    issue_late: Issue a late-return fee (admin)
    """

    serializer_class = PenaltySerializer
    permission_classes = [IsAuthenticated, IsOwnerOrLendingAdmin]
    pagination_class = PenaltyPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Penalty.objects.none()

        if self.action == 'retrieve':
            return Penalty.objects.select_related('account').prefetch_related('details')

        filter_serializer = PenaltyFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        resolved = filter_serializer.validated_data.get('resolved')

        queryset = list_penalties_for_account(account_id=self.request.user.id)
        if resolved is not None:
            queryset = queryset.filter(resolved=resolved)
        return queryset

    def get_permissions(self):
        if self.action in ['unresolved', 'issue_late']:
            return [IsAuthenticated(), IsLendingAdmin()]
        return super().get_permissions()

    @extend_schema(
        request=None,
        responses={200: PenaltySerializer, 402: ErrorSerializer, 403: ErrorSerializer,
                   404: ErrorSerializer, 409: ErrorSerializer},
    )
    @action(detail=True, methods=['post'])
    def pay(self, request, pk=None):
        """Pay the outstanding amount of an own penalty from the wallet."""
        try:
            penalty = pay_penalty(penalty_id=pk, account=request.user)
        except PenaltyNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InsufficientPermissionsError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except PenaltyAlreadyResolvedError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        except InsufficientBalanceError as e:
            return Response({'error': str(e)}, status=status.HTTP_402_PAYMENT_REQUIRED)

        return Response(PenaltySerializer(penalty).data)

    @action(detail=False, methods=['get'])
    def unresolved(self, request):
        """All unresolved penalties (receivables)."""
        page = self.paginate_queryset(list_unresolved_penalties())
        serializer = PenaltySerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @extend_schema(responses={200: PenaltyPolicySerializer(many=True)})
    @action(detail=False, methods=['get'])
    def policies(self, request):
        """Penalty policies currently in force."""
        serializer = PenaltyPolicySerializer(get_active_policies(), many=True)
        return Response(serializer.data)

    @extend_schema(
        request=IssueLatePenaltyInputSerializer,
        responses={201: PenaltySerializer, 400: ErrorSerializer, 404: ErrorSerializer,
                   409: ErrorSerializer},
    )
    @action(detail=False, methods=['post'])
    def issue_late(self, request):
        """Issue a late-return fee for a request returned late."""
        serializer = IssueLatePenaltyInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            penalty = issue_late_penalty(
                request_id=data['borrow_request'],
                policy_id=data['policy'],
                issued_by=request.user,
                note=data['note'],
            )
        except (RequestNotFoundError, PolicyNotFoundError) as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except InvalidPolicyError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except LatePenaltyNotApplicableError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(PenaltySerializer(penalty).data, status=status.HTTP_201_CREATED)
