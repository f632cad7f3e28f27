"""
Forward-only status lifecycles.

Each registry with a status field declares its allowed moves once, as a
StatusLifecycle, and every mutation goes through `check()`. Any move that is
not listed raises InvalidStatusTransition (HTTP 409).

Usage:
    EMERGENCY_LIFECYCLE = StatusLifecycle('Emergency', {
        'open': {'in_progress', 'closed'},
        'in_progress': {'completed'},
        'completed': {'closed'},
    })

    EMERGENCY_LIFECYCLE.check(emergency.status, 'in_progress')
"""

import logging
from typing import Dict, Iterable, Set

from api.exceptions import InvalidStatusTransition

logger = logging.getLogger(__name__)


class StatusLifecycle:
    """Table of allowed status moves for one entity type."""

    def __init__(self, entity: str, transitions: Dict[str, Iterable[str]]):
        self.entity = entity
        self.transitions: Dict[str, Set[str]] = {
            source: set(targets) for source, targets in transitions.items()
        }

    def allowed_targets(self, current: str) -> Set[str]:
        return self.transitions.get(current, set())

    def can_transition(self, current: str, target: str) -> bool:
        return target in self.allowed_targets(current)

    def check(self, current: str, target: str) -> None:
        """Raise InvalidStatusTransition unless current -> target is allowed."""
        if self.can_transition(current, target):
            return
        logger.warning(
            f"TRANSITION_REJECTED: entity={self.entity} from={current} to={target}"
        )
        raise InvalidStatusTransition(
            entity=self.entity,
            current_status=current,
            target_status=target,
            allowed=sorted(self.allowed_targets(current)),
        )

    def is_terminal(self, status: str) -> bool:
        return not self.allowed_targets(status)
