"""
Concurrent approval tests.

Row locks are needed for these tests; SQLite has no SELECT ... FOR UPDATE
so they are skipped there.
"""

import threading
import unittest
from datetime import timedelta
from decimal import Decimal

from django.db import connection, connections
from django.test import TransactionTestCase
from django.utils import timezone

from apps.accounts.models import User, AccountRole
from apps.borrowing.models import BorrowingRequest, BorrowingStatus, RequestType
from apps.borrowing.services import create_borrowing_request, approve_borrowing_request
from apps.inventory.models import KitComponent
from apps.inventory.services.exceptions import InsufficientInventoryError
from apps.wallets.models import Wallet


@unittest.skipIf(connection.vendor == 'sqlite', 'SQLite has no row-level locks')
class TestConcurrentApproval(TransactionTestCase):
    """
    Parallel approvals competing for the same stock.

    TransactionTestCase commits for real, so each thread sees the others'
    locks.
    """

    def setUp(self):
        """Create test fixtures."""
        self.admin = User.objects.create_user(
            email='admin@test.com',
            password='AdminPass123!',
            role=AccountRole.ADMIN,
        )
        self.component = KitComponent.objects.create(
            component_name='Arduino Uno R3',
            quantity_total=10,
            quantity_available=10,
            price_per_unit=Decimal('50000.00'),
        )

    def _request_for(self, email, quantity):
        user = User.objects.create_user(email=email, password='TestPass123!')
        Wallet.objects.create(account=user, balance=Decimal('1000000.00'))
        return create_borrowing_request(
            requested_by=user,
            request_type=RequestType.BORROW_COMPONENT,
            reason='Race',
            expect_return_date=timezone.now() + timedelta(days=7),
            components=[{'component_id': self.component.id, 'quantity': quantity}],
        )

    def test_parallel_approvals_never_oversell(self):
        """
        Two requests for 4 and 7 of 10 units: exactly one approval wins.

        The guarded decrement in reserve() refuses the loser instead of
        driving availability negative.
        """
        requests = [
            self._request_for('first@test.com', 4),
            self._request_for('second@test.com', 7),
        ]

        results = []
        errors = []
        barrier = threading.Barrier(len(requests))

        def approve(request_id):
            """Approve a request in a thread."""
            barrier.wait()
            try:
                approve_borrowing_request(request_id=request_id, approver=self.admin)
                results.append(request_id)
            except InsufficientInventoryError as e:
                errors.append(str(e))
            finally:
                connections.close_all()

        threads = [
            threading.Thread(target=approve, args=(borrow_request.id,))
            for borrow_request in requests
        ]

        for thread in threads:
            thread.start()

        for thread in threads:
            thread.join()

        assert len(results) == 1, f"Expected one approval, got {len(results)}"
        assert len(errors) == 1

        winner = BorrowingRequest.objects.get(status=BorrowingStatus.APPROVED)
        self.component.refresh_from_db()
        assert self.component.quantity_available == 10 - winner.components.get().quantity
        assert BorrowingRequest.objects.filter(status=BorrowingStatus.PENDING_APPROVAL).count() == 1
