"""
Damage assessment.

Turns an inspector's per-component damage map into fine lines. Pure:
no database access, the same input always gives the same result.

Damage map shape::

    {
        'Arduino Uno R3': {
            'damaged': True,
            'quantity': 1,
            'unit_value': Decimal('50000'),    # optional, defaults to unit price
            'description': 'Burnt regulator',  # optional
            'damage_type': 'damaged',          # or 'lost'
            'image_url': 'https://...',        # optional evidence
        },
    }
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional, Tuple
from uuid import UUID

from .exceptions import InvalidDamageAssessmentError

CENT = Decimal('0.01')
DAMAGE_TYPES = ('damaged', 'lost')


@dataclass(frozen=True)
class PenaltyLine:
    component_name: str
    quantity: int
    unit_value: Decimal
    amount: Decimal
    description: str
    damage_type: str = 'damaged'
    component_id: Optional[UUID] = None
    policy_id: Optional[UUID] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class DamageAssessment:
    fine_amount: Decimal = Decimal('0.00')
    lines: Tuple[PenaltyLine, ...] = field(default_factory=tuple)

    @property
    def has_fine(self) -> bool:
        return self.fine_amount > 0

    def damaged_quantity(self, component_name: str) -> int:
        """Total damaged units recorded for a component."""
        return sum(line.quantity for line in self.lines if line.component_name == component_name)


def _to_decimal(value, name: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidDamageAssessmentError(f"Invalid damage value for {name}: {value!r}")
    if not amount.is_finite() or amount < 0:
        raise InvalidDamageAssessmentError(f"Invalid damage value for {name}: {value!r}")
    return amount


def _damaged_quantity(entry: Mapping, name: str, rented: Optional[int]) -> int:
    """Reported quantity clamped to [1, rented]; 0 means not damaged."""
    raw = entry.get('quantity', 1)
    try:
        quantity = int(raw)
    except (TypeError, ValueError):
        raise InvalidDamageAssessmentError(f"Invalid damaged quantity for {name}: {raw!r}")
    if quantity < 0:
        raise InvalidDamageAssessmentError(f"Invalid damaged quantity for {name}: {raw!r}")
    if quantity == 0:
        return 0
    upper = rented if rented is not None else quantity
    return max(1, min(quantity, upper))


def assess_damage(
    damage_map: Mapping[str, Mapping],
    rented_quantities: Optional[Mapping[str, int]] = None,
    component_ids: Optional[Mapping[str, UUID]] = None,
    policies: Optional[Mapping[str, UUID]] = None,
    unit_prices: Optional[Mapping[str, Decimal]] = None,
) -> DamageAssessment:
    """
    Compute the fine for a damage map.

    Each damaged entry yields one line of ``unit_value * quantity``. The
    fine is the sum of the lines and is not capped by anything.

    Args:
        damage_map: Component name to damage entry
        rented_quantities: Units of each component in the rental. When
            given, names outside it are rejected and quantities are
            clamped to it.
        component_ids: Component name to KitComponent ID, copied onto lines
        policies: Damage type to PenaltyPolicy ID. Attached to lines for
            display; the policy amount is never used.
        unit_prices: Component name to price used when an entry has no
            ``unit_value``

    Returns:
        DamageAssessment with the fine and its lines, in damage map order

    Raises:
        InvalidDamageAssessmentError: For unknown components, negative
            quantities or values, or damaged entries without a value
    """
    rented_quantities = rented_quantities or {}
    component_ids = component_ids or {}
    policies = policies or {}
    unit_prices = unit_prices or {}
    check_membership = bool(rented_quantities)

    lines = []
    for name, entry in (damage_map or {}).items():
        if check_membership and name not in rented_quantities:
            raise InvalidDamageAssessmentError(f"{name} is not part of this rental")
        if not entry or not entry.get('damaged'):
            continue

        quantity = _damaged_quantity(entry, name, rented_quantities.get(name))
        if quantity == 0:
            continue

        if entry.get('unit_value') is not None:
            unit_value = _to_decimal(entry['unit_value'], name)
        elif name in unit_prices:
            unit_value = _to_decimal(unit_prices[name], name)
        else:
            raise InvalidDamageAssessmentError(f"No value given for damaged {name}")

        damage_type = entry.get('damage_type') or 'damaged'
        if damage_type not in DAMAGE_TYPES:
            raise InvalidDamageAssessmentError(f"Unknown damage type for {name}: {damage_type!r}")

        lines.append(PenaltyLine(
            component_name=name,
            quantity=quantity,
            unit_value=unit_value,
            amount=(unit_value * quantity).quantize(CENT),
            description=entry.get('description') or f"Damage to {name}",
            damage_type=damage_type,
            component_id=component_ids.get(name),
            policy_id=policies.get(damage_type),
            image_url=entry.get('image_url') or None,
        ))

    fine_amount = sum((line.amount for line in lines), Decimal('0.00'))
    return DamageAssessment(fine_amount=fine_amount, lines=tuple(lines))
