"""
Bouncer - Access Gate Service
=============================

Code submissions, lockout escalation and role grants.

Structure:
    - service.py: AccessGate
    - escalation.py: EscalationNotifier
    - roles.py: grant_roles shared with the role buttons
"""

from .escalation import EscalationNotifier, EscalationReport
from .roles import RoleGrantResult, grant_roles
from .service import AccessGate, GateResult, GateUnavailable

__all__ = [
    "AccessGate",
    "EscalationNotifier",
    "EscalationReport",
    "GateResult",
    "GateUnavailable",
    "RoleGrantResult",
    "grant_roles",
]
