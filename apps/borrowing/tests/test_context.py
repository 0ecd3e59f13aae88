"""
Tests for the borrower context resolver.
"""

import pytest

from django.urls import reverse

from apps.borrowing.context import resolve_context
from apps.borrowing.models import RequestType
from apps.borrowing.services import create_borrowing_request


def group_context(account):
    return {'group_name': 'Team 7', 'class_code': 'SE1701', 'email': account.email}


def broken_context(account):
    raise RuntimeError('directory unavailable')


@pytest.mark.django_db
class TestResolveContext:
    """Tests for resolve_context()."""

    def test_default_is_empty(self, borrower):
        assert resolve_context(borrower) == {}

    def test_configured_resolver(self, borrower, settings):
        settings.BORROWING_CONTEXT_RESOLVER = 'apps.borrowing.tests.test_context.group_context'

        context = resolve_context(borrower)

        assert context['group_name'] == 'Team 7'
        assert context['email'] == 'borrower@example.com'

    def test_failing_resolver_yields_empty(self, borrower, settings):
        settings.BORROWING_CONTEXT_RESOLVER = 'apps.borrowing.tests.test_context.broken_context'

        assert resolve_context(borrower) == {}

    def test_context_shown_to_inspectors(self, admin_client, borrower, wallet, component,
                                         return_date, settings):
        settings.BORROWING_CONTEXT_RESOLVER = 'apps.borrowing.tests.test_context.group_context'
        borrow_request = create_borrowing_request(
            requested_by=borrower,
            request_type=RequestType.BORROW_COMPONENT,
            reason='Lab 3 project',
            expect_return_date=return_date,
            components=[{'component_id': component.id, 'quantity': 1}],
        )

        url = reverse('borrowing:request-pending')
        response = admin_client.get(url)

        assert response.data['results'][0]['id'] == str(borrow_request.id)
        assert response.data['results'][0]['borrower_context']['class_code'] == 'SE1701'
