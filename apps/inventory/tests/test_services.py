"""
Service layer tests for the inventory ledger.

Tests cover:
- Guarded reservation and release
- Kit status following availability
- Damage write-offs for bundled components
- Movement history
- Legacy status normalization
"""

import pytest
from uuid import uuid4

from apps.inventory.models import (
    Kit,
    KitComponent,
    KitComponentHistory,
    KitStatus,
    HistoryAction,
    normalize_kit_status,
)
from apps.inventory.services import (
    get_kit,
    get_component,
    lock_components,
    reserve,
    release,
    mark_damaged,
    list_history,
)
from apps.inventory.services.exceptions import (
    KitNotFoundError,
    ComponentNotFoundError,
    InsufficientInventoryError,
    InvalidQuantityError,
)


# =============================================================================
# Lookups
# =============================================================================

@pytest.mark.django_db
class TestLookups:
    """Tests for get_kit, get_component and lock_components."""

    def test_get_kit(self, kit):
        assert get_kit(kit_id=kit.id) == kit

    def test_get_kit_not_found(self):
        with pytest.raises(KitNotFoundError):
            get_kit(kit_id=uuid4())

    def test_get_component_not_found(self):
        with pytest.raises(ComponentNotFoundError):
            get_component(component_id=uuid4())

    def test_lock_components_returns_all(self, global_component, bundled_component):
        locked = lock_components(component_ids=[str(global_component.id), bundled_component.id])

        assert set(locked) == {global_component.id, bundled_component.id}

    def test_lock_components_missing_id(self, global_component):
        with pytest.raises(ComponentNotFoundError):
            lock_components(component_ids=[global_component.id, uuid4()])

    def test_is_in_stock(self, kit, global_component):
        assert kit.is_in_stock()
        assert global_component.is_in_stock(10)
        assert not global_component.is_in_stock(11)

        reserve(target=kit, quantity=2)

        kit.refresh_from_db()
        assert not kit.is_in_stock()


# =============================================================================
# Reserve / Release
# =============================================================================

@pytest.mark.django_db
class TestReserve:
    """Tests for reserve()."""

    def test_reserve_decrements_availability(self, global_component):
        reserve(target=global_component, quantity=3)

        global_component.refresh_from_db()
        assert global_component.quantity_available == 7
        assert global_component.quantity_total == 10

    def test_reserve_exact_remaining_stock(self, global_component):
        reserve(target=global_component, quantity=10)

        global_component.refresh_from_db()
        assert global_component.quantity_available == 0
        assert global_component.status == KitStatus.IN_USE

    def test_reserve_more_than_available_fails(self, global_component):
        with pytest.raises(InsufficientInventoryError):
            reserve(target=global_component, quantity=11)

        global_component.refresh_from_db()
        assert global_component.quantity_available == 10
        assert not KitComponentHistory.objects.exists()

    def test_reserve_uses_stored_availability(self, global_component):
        """A stale in-memory object cannot over-reserve."""
        KitComponent.objects.filter(pk=global_component.pk).update(quantity_available=1)

        with pytest.raises(InsufficientInventoryError):
            reserve(target=global_component, quantity=2)

    def test_reserve_zero_quantity_rejected(self, global_component):
        with pytest.raises(InvalidQuantityError):
            reserve(target=global_component, quantity=0)

    def test_reserve_last_kit_marks_in_use(self, kit):
        reserve(target=kit, quantity=1)
        kit.refresh_from_db()
        assert kit.status == KitStatus.AVAILABLE

        reserve(target=kit, quantity=1)
        kit.refresh_from_db()
        assert kit.quantity_available == 0
        assert kit.status == KitStatus.IN_USE

    def test_reserve_records_history(self, kit):
        request_id = uuid4()

        reserve(target=kit, quantity=1, borrow_request_id=request_id)

        entry = KitComponentHistory.objects.get()
        assert entry.action == HistoryAction.RESERVED
        assert entry.kit == kit
        assert entry.kit_component is None
        assert entry.borrow_request_id == request_id


@pytest.mark.django_db
class TestRelease:
    """Tests for release()."""

    def test_release_increments_availability(self, global_component):
        reserve(target=global_component, quantity=4)

        release(target=global_component, quantity=4)

        global_component.refresh_from_db()
        assert global_component.quantity_available == 10

    def test_release_is_clamped_to_total(self, global_component):
        reserve(target=global_component, quantity=2)

        release(target=global_component, quantity=5)

        global_component.refresh_from_db()
        assert global_component.quantity_available == 10

    def test_release_restores_available_status(self, kit):
        reserve(target=kit, quantity=2)

        release(target=kit, quantity=1)

        kit.refresh_from_db()
        assert kit.status == KitStatus.AVAILABLE

    def test_release_keeps_maintenance_status(self, maintenance_kit):
        Kit.objects.filter(pk=maintenance_kit.pk).update(quantity_available=0)
        maintenance_kit.refresh_from_db()

        release(target=maintenance_kit, quantity=1)

        maintenance_kit.refresh_from_db()
        assert maintenance_kit.quantity_available == 1
        assert maintenance_kit.status == KitStatus.MAINTENANCE

    def test_release_records_component_and_kit(self, bundled_component, kit):
        release(target=bundled_component, quantity=1)

        entry = KitComponentHistory.objects.get()
        assert entry.action == HistoryAction.RELEASED
        assert entry.kit_component == bundled_component
        assert entry.kit == kit


# =============================================================================
# Damage
# =============================================================================

@pytest.mark.django_db
class TestMarkDamaged:
    """Tests for mark_damaged()."""

    def test_bundled_component_loses_availability(self, bundled_component):
        mark_damaged(component=bundled_component, quantity=1)

        bundled_component.refresh_from_db()
        assert bundled_component.quantity_available == 3
        assert KitComponentHistory.objects.get().action == HistoryAction.DAMAGED

    def test_bundled_component_never_negative(self, bundled_component):
        mark_damaged(component=bundled_component, quantity=9)

        bundled_component.refresh_from_db()
        assert bundled_component.quantity_available == 0

    def test_global_component_only_logged(self, global_component):
        reserve(target=global_component, quantity=2)

        mark_damaged(component=global_component, quantity=1)

        global_component.refresh_from_db()
        assert global_component.quantity_available == 8
        assert KitComponentHistory.objects.filter(action=HistoryAction.DAMAGED).count() == 1


# =============================================================================
# History
# =============================================================================

@pytest.mark.django_db
class TestHistory:
    """Tests for list_history()."""

    def test_filter_by_request(self, kit, global_component):
        request_id = uuid4()
        reserve(target=kit, quantity=1, borrow_request_id=request_id)
        reserve(target=global_component, quantity=1)

        entries = list_history(borrow_request_id=request_id)

        assert [e.kit for e in entries] == [kit]

    def test_filter_by_component(self, kit, global_component):
        reserve(target=kit, quantity=1)
        reserve(target=global_component, quantity=1)

        entries = list_history(component_id=global_component.id)

        assert entries.count() == 1


# =============================================================================
# Normalization
# =============================================================================

class TestNormalizeKitStatus:
    """Tests for normalize_kit_status()."""

    @pytest.mark.parametrize('raw, expected', [
        ('AVAILABLE', KitStatus.AVAILABLE),
        ('Active', KitStatus.AVAILABLE),
        ('ACTIVE', KitStatus.AVAILABLE),
        (True, KitStatus.AVAILABLE),
        ('in-use', KitStatus.IN_USE),
        ('BORROWED', KitStatus.IN_USE),
        (False, KitStatus.MAINTENANCE),
        ('damaged', KitStatus.DAMAGED),
    ])
    def test_known_values(self, raw, expected):
        assert normalize_kit_status(raw) == expected

    @pytest.mark.parametrize('raw', ['LOST', '', None, 3])
    def test_unknown_values(self, raw):
        with pytest.raises(ValueError):
            normalize_kit_status(raw)
