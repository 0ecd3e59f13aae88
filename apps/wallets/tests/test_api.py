"""
API tests for wallet endpoints.
"""

import pytest
from decimal import Decimal
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.borrowing.models import BorrowingRequest, BorrowingStatus, RequestType
from apps.penalties.models import Penalty
from apps.wallets.services import get_balance


@pytest.mark.django_db
class TestMyWallet:
    """Tests for GET /api/wallets/me/."""

    def test_requires_authentication(self, api_client):
        response = api_client.get(reverse('wallets:my-wallet'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_returns_balance(self, authenticated_client, wallet):
        response = authenticated_client.get(reverse('wallets:my-wallet'))

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(response.data['balance']) == Decimal('100000.00')

    def test_opens_empty_wallet(self, authenticated_client, user):
        response = authenticated_client.get(reverse('wallets:my-wallet'))

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(response.data['balance']) == Decimal('0')

    def test_shows_outstanding_penalties(self, authenticated_client, wallet, user):
        now = timezone.now()
        borrow_request = BorrowingRequest.objects.create(
            request_type=RequestType.BORROW_COMPONENT,
            requested_by=user,
            deposit_amount=Decimal('50000.00'),
            reason='Lab 2',
            expect_return_date=now,
            actual_return_date=now,
            status=BorrowingStatus.RETURNED,
        )
        Penalty.objects.create(
            borrow_request=borrow_request,
            account=user,
            total_amount=Decimal('80000.00'),
            settled_amount=Decimal('50000.00'),
        )
        Penalty.objects.create(
            borrow_request=borrow_request,
            account=user,
            total_amount=Decimal('10000.00'),
            settled_amount=Decimal('10000.00'),
            resolved=True,
        )

        response = authenticated_client.get(reverse('wallets:my-wallet'))

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(response.data['outstanding_penalties']) == Decimal('30000.00')

    def test_no_penalties_owed(self, authenticated_client, wallet):
        response = authenticated_client.get(reverse('wallets:my-wallet'))

        assert Decimal(response.data['outstanding_penalties']) == Decimal('0')


@pytest.mark.django_db
class TestTopUpEndpoint:
    """Tests for POST /api/wallets/top_up/."""

    def test_top_up(self, authenticated_client, user):
        response = authenticated_client.post(
            reverse('wallets:top-up'), {'amount': '50000'}, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['transaction_type'] == 'TOP_UP'
        assert get_balance(account_id=user.id) == Decimal('50000.00')

    def test_top_up_below_minimum(self, authenticated_client, user):
        response = authenticated_client.post(
            reverse('wallets:top-up'), {'amount': '500'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data


@pytest.mark.django_db
class TestTransferEndpoint:
    """Tests for POST /api/wallets/transfer/."""

    def test_transfer(self, authenticated_client, wallet, other_user):
        response = authenticated_client.post(
            reverse('wallets:transfer'),
            {'recipient': str(other_user.id), 'amount': '20000'},
            format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert get_balance(account_id=other_user.id) == Decimal('20000.00')

    def test_transfer_insufficient_balance(self, authenticated_client, wallet, other_user):
        response = authenticated_client.post(
            reverse('wallets:transfer'),
            {'recipient': str(other_user.id), 'amount': '200000'},
            format='json'
        )

        assert response.status_code == status.HTTP_402_PAYMENT_REQUIRED

    def test_transfer_to_self(self, authenticated_client, wallet, user):
        response = authenticated_client.post(
            reverse('wallets:transfer'),
            {'recipient': str(user.id), 'amount': '1000'},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestTransactionsEndpoint:
    """Tests for GET /api/wallets/transactions/."""

    def test_lists_own_entries(self, authenticated_client, user):
        authenticated_client.post(reverse('wallets:top-up'), {'amount': '20000'}, format='json')

        response = authenticated_client.get(reverse('wallets:transactions'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['transaction_type'] == 'TOP_UP'
