"""
Penalties app services layer.

The calculator is pure; persistence and settlement live in
penalty_management and run inside database transactions.
"""

from .exceptions import (
    PenaltiesServiceError,
    PenaltyNotFoundError,
    PolicyNotFoundError,
    InvalidDamageAssessmentError,
    InvalidPolicyError,
    PenaltyAlreadyResolvedError,
    LatePenaltyNotApplicableError,
    InsufficientPermissionsError,
)

from .calculator import (
    DamageAssessment,
    PenaltyLine,
    assess_damage,
)

from .penalty_management import (
    semester_for,
    get_active_policies,
    policy_lookup,
    get_policy,
    create_penalty_from_assessment,
    issue_late_penalty,
    pay_penalty,
    get_penalty,
    list_penalties_for_account,
    list_unresolved_penalties,
    outstanding_total,
)


__all__ = [
    # Exceptions
    'PenaltiesServiceError',
    'PenaltyNotFoundError',
    'PolicyNotFoundError',
    'InvalidDamageAssessmentError',
    'InvalidPolicyError',
    'PenaltyAlreadyResolvedError',
    'LatePenaltyNotApplicableError',
    'InsufficientPermissionsError',

    # Calculator
    'DamageAssessment',
    'PenaltyLine',
    'assess_damage',

    # Penalty management
    'semester_for',
    'get_active_policies',
    'policy_lookup',
    'get_policy',
    'create_penalty_from_assessment',
    'issue_late_penalty',
    'pay_penalty',
    'get_penalty',
    'list_penalties_for_account',
    'list_unresolved_penalties',
    'outstanding_total',
]
