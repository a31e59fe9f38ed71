"""
Domain dataclasses used across the application.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from outreach.roles import Role


@dataclass
class Actor:
    """An authenticated identity as presented by the session token."""
    user_id: str
    metadata: Dict[str, Any] = field(default_factory=dict)  # untrusted, may hold "role"


@dataclass(frozen=True)
class RoleResolution:
    """Outcome of a single role resolution cycle."""
    role: Optional[Role]
    source: Optional[str] = None   # "record", "metadata" or None
    error: Optional[str] = None    # store fault message, diagnostic only

    @property
    def resolved(self) -> bool:
        return self.role is not None


class AccessDecision(str, Enum):
    ALLOWED = "allowed"
    UNRESOLVED = "unresolved"   # no role could be determined
    DENIED = "denied"           # role known, permission missing


@dataclass(frozen=True)
class GateResult:
    decision: AccessDecision
    resolution: RoleResolution
    reason: str = ""

    @property
    def allowed(self) -> bool:
        return self.decision is AccessDecision.ALLOWED

    @property
    def role(self) -> Optional[Role]:
        return self.resolution.role
