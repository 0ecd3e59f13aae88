from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.exceptions import AccountNotFoundError

from .serializers import (
    MyWalletSerializer,
    WalletTransactionSerializer,
    TransferResponseSerializer,
    ErrorSerializer,
    TopUpInputSerializer,
    TransferInputSerializer,
    TransactionFilterSerializer,
)
from .services import (
    get_or_create_wallet,
    top_up,
    transfer,
    list_transactions,
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidTransferError,
)


class TransactionPagination(PageNumberPagination):
    """Custom pagination for ledger entries."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


@extend_schema(
    responses={200: MyWalletSerializer},
    description="Get the current user's wallet.",
    tags=['wallets'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_wallet(request):
    """Get the current user's wallet - thin HTTP handler."""
    wallet = get_or_create_wallet(account_id=request.user.id)
    return Response(MyWalletSerializer(wallet).data)


@extend_schema(
    parameters=[TransactionFilterSerializer],
    responses={200: WalletTransactionSerializer(many=True)},
    description="List the current user's wallet transactions, newest first.",
    tags=['wallets'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_transactions(request):
    """List ledger entries of the current user."""
    query_serializer = TransactionFilterSerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    queryset = list_transactions(
        account_id=request.user.id,
        transaction_type=query_serializer.validated_data.get('transaction_type'),
    )

    paginator = TransactionPagination()
    page = paginator.paginate_queryset(queryset, request)
    serializer = WalletTransactionSerializer(page, many=True)
    return paginator.get_paginated_response(serializer.data)


@extend_schema(
    request=TopUpInputSerializer,
    responses={201: WalletTransactionSerializer, 400: ErrorSerializer},
    description="Add funds to the current user's wallet.",
    tags=['wallets'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def top_up_wallet(request):
    """Top up the current user's wallet."""
    serializer = TopUpInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        entry = top_up(account_id=request.user.id, amount=serializer.validated_data['amount'])
    except InvalidAmountError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(WalletTransactionSerializer(entry).data, status=status.HTTP_201_CREATED)


@extend_schema(
    request=TransferInputSerializer,
    responses={
        201: TransferResponseSerializer,
        400: ErrorSerializer,
        402: ErrorSerializer,
        404: ErrorSerializer,
    },
    description="Transfer funds to another account's wallet.",
    tags=['wallets'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def transfer_funds(request):
    """Transfer money from the current user to another account."""
    serializer = TransferInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        outgoing, incoming = transfer(
            sender_id=request.user.id,
            recipient_id=data['recipient'],
            amount=data['amount'],
            note=data.get('note', ''),
        )
    except (InvalidAmountError, InvalidTransferError) as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except InsufficientBalanceError as e:
        return Response({'error': str(e)}, status=status.HTTP_402_PAYMENT_REQUIRED)
    except AccountNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(
        {
            'outgoing': WalletTransactionSerializer(outgoing).data,
            'incoming': WalletTransactionSerializer(incoming).data,
        },
        status=status.HTTP_201_CREATED
    )
