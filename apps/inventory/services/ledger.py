"""
Inventory ledger.

Every availability change goes through this module. Decrements are
guarded conditional updates executed under a row lock, so two
transactions can never both take the last unit. Each movement is
appended to KitComponentHistory.
"""

from typing import Optional, Union
from uuid import UUID

from django.db import transaction
from django.db.models import F, QuerySet
from django.db.models.functions import Greatest, Least
from loguru import logger

from apps.inventory.models import (
    Kit,
    KitComponent,
    KitComponentHistory,
    KitStatus,
    HistoryAction,
)

from .exceptions import (
    KitNotFoundError,
    ComponentNotFoundError,
    InsufficientInventoryError,
    InvalidQuantityError,
)

Stocked = Union[Kit, KitComponent]

# Statuses set by an administrator, never changed by stock movements
MANUAL_STATUSES = (KitStatus.MAINTENANCE, KitStatus.DAMAGED)


def get_kit(*, kit_id: UUID) -> Kit:
    """
    Get a kit by ID.

    Raises:
        KitNotFoundError: If kit doesn't exist
    """
    try:
        return Kit.objects.get(id=kit_id)
    except Kit.DoesNotExist:
        raise KitNotFoundError(f"Kit with ID {kit_id} not found")


def get_component(*, component_id: UUID) -> KitComponent:
    """
    Get a kit component by ID.

    Raises:
        ComponentNotFoundError: If component doesn't exist
    """
    try:
        return KitComponent.objects.select_related('kit').get(id=component_id)
    except KitComponent.DoesNotExist:
        raise ComponentNotFoundError(f"Component with ID {component_id} not found")


def lock_components(*, component_ids) -> dict:
    """
    Lock component rows in primary key order.

    Must be called inside a transaction. Returns a dict keyed by ID.

    Raises:
        ComponentNotFoundError: If any component doesn't exist
    """
    ids = sorted({UUID(str(component_id)) for component_id in component_ids})
    components = {
        c.id: c
        for c in KitComponent.objects.select_for_update().filter(id__in=ids).order_by('id')
    }
    for component_id in ids:
        if component_id not in components:
            raise ComponentNotFoundError(f"Component with ID {component_id} not found")
    return components


def _target_ref(target: Stocked) -> dict:
    if isinstance(target, Kit):
        return {'kit': target}
    return {'kit_component': target, 'kit': target.kit}


def _sync_status(target: Stocked) -> None:
    """Flip between AVAILABLE and IN_USE to follow stock."""
    if target.status in MANUAL_STATUSES:
        return

    status = KitStatus.IN_USE if target.quantity_available == 0 else KitStatus.AVAILABLE
    if status != target.status:
        target.status = status
        target.save(update_fields=['status', 'updated_at'])


def _check_quantity(quantity: int) -> None:
    if quantity <= 0:
        raise InvalidQuantityError(f"Quantity must be positive, got {quantity}")


def _record(target: Stocked, action: str, quantity: int,
            borrow_request_id: Optional[UUID], note: str) -> KitComponentHistory:
    return KitComponentHistory.objects.create(
        action=action,
        quantity=quantity,
        borrow_request_id=borrow_request_id,
        note=note,
        **_target_ref(target)
    )


@transaction.atomic
def reserve(
    *,
    target: Stocked,
    quantity: int,
    borrow_request_id: Optional[UUID] = None,
    note: str = ''
) -> Stocked:
    """
    Take units out of stock.

    The row is locked and decremented only if enough units remain.

    Args:
        target: Kit or KitComponent to reserve from
        quantity: Number of units (positive)
        borrow_request_id: Request the units are reserved for
        note: Free text stored in the history log

    Returns:
        The refreshed target

    Raises:
        InvalidQuantityError: If quantity is not positive
        InsufficientInventoryError: If fewer than quantity units are available
    """
    _check_quantity(quantity)
    model = type(target)

    model.objects.select_for_update().filter(pk=target.pk).first()
    updated = (
        model.objects
        .filter(pk=target.pk, quantity_available__gte=quantity)
        .update(quantity_available=F('quantity_available') - quantity)
    )
    if not updated:
        logger.warning(f"Reservation of {quantity} x {target} refused: insufficient stock")
        raise InsufficientInventoryError(
            f"Only {model.objects.get(pk=target.pk).quantity_available} "
            f"unit(s) of {target} available, {quantity} requested"
        )

    target.refresh_from_db()
    _sync_status(target)
    _record(target, HistoryAction.RESERVED, quantity, borrow_request_id, note)

    logger.info(f"Reserved {quantity} x {target} for request {borrow_request_id}")
    return target


@transaction.atomic
def release(
    *,
    target: Stocked,
    quantity: int,
    borrow_request_id: Optional[UUID] = None,
    note: str = ''
) -> Stocked:
    """
    Return units to stock.

    Availability never exceeds quantity_total; extra units are ignored.

    Raises:
        InvalidQuantityError: If quantity is not positive
    """
    _check_quantity(quantity)
    model = type(target)

    model.objects.select_for_update().filter(pk=target.pk).first()
    model.objects.filter(pk=target.pk).update(
        quantity_available=Least(F('quantity_available') + quantity, F('quantity_total'))
    )

    target.refresh_from_db()
    _sync_status(target)
    _record(target, HistoryAction.RELEASED, quantity, borrow_request_id, note)

    logger.info(f"Released {quantity} x {target} for request {borrow_request_id}")
    return target


@transaction.atomic
def mark_damaged(
    *,
    component: KitComponent,
    quantity: int,
    borrow_request_id: Optional[UUID] = None,
    note: str = ''
) -> KitComponent:
    """
    Record damaged units of a component.

    Bundled components sit in stock with their kit, so their damaged
    units are removed from availability (never below zero). Global
    components are already out of stock while rented; the caller simply
    does not release the damaged units, and only the log entry is written.

    Raises:
        InvalidQuantityError: If quantity is not positive
    """
    _check_quantity(quantity)

    if not component.is_global:
        KitComponent.objects.select_for_update().filter(pk=component.pk).first()
        KitComponent.objects.filter(pk=component.pk).update(
            quantity_available=Greatest(F('quantity_available') - quantity, 0)
        )
        component.refresh_from_db()
        _sync_status(component)

    _record(component, HistoryAction.DAMAGED, quantity, borrow_request_id, note)

    logger.info(f"Marked {quantity} x {component} damaged for request {borrow_request_id}")
    return component


def list_history(
    *,
    kit_id: Optional[UUID] = None,
    component_id: Optional[UUID] = None,
    borrow_request_id: Optional[UUID] = None
) -> QuerySet:
    """Return history entries, newest first, optionally filtered."""
    queryset = KitComponentHistory.objects.select_related('kit', 'kit_component')
    if kit_id:
        queryset = queryset.filter(kit_id=kit_id)
    if component_id:
        queryset = queryset.filter(kit_component_id=component_id)
    if borrow_request_id:
        queryset = queryset.filter(borrow_request_id=borrow_request_id)
    return queryset
