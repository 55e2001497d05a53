"""
Lifecycle rules for device mutations.

States never restrict which state a device moves to next. What a state
restricts is which *other* fields may change while the device is in it, and
whether the device may be deleted at all.
"""

# Standard library imports
from dataclasses import dataclass
from typing import Dict, FrozenSet, Union

# Local application imports
from ..constants.device_fields import DeviceFields
from ..models.device import DeviceChanges, DeviceState


LOCKED_FIELDS: Dict[DeviceState, FrozenSet[str]] = {
    DeviceState.AVAILABLE: frozenset(),
    DeviceState.IN_USE: frozenset({DeviceFields.NAME, DeviceFields.BRAND}),
    DeviceState.INACTIVE: frozenset(),
}

UNDELETABLE_STATES: FrozenSet[DeviceState] = frozenset({DeviceState.IN_USE})

RESTRICTED_CHANGE_REASON = "Cannot update brand or name for devices in use"
RESTRICTED_DELETE_REASON = "Cannot delete devices in use"


@dataclass(frozen=True)
class Allowed:
    """The proposed mutation is admissible"""
    allowed: bool = True


@dataclass(frozen=True)
class Denied:
    """The proposed mutation violates a lifecycle rule"""
    reason: str
    allowed: bool = False


Decision = Union[Allowed, Denied]


class LifecyclePolicy:
    """Stateless decision logic; safe to share between requests"""

    def locked_fields(self, state: DeviceState) -> FrozenSet[str]:
        return LOCKED_FIELDS.get(state, frozenset())

    def authorize(self, current_state: DeviceState, changes: DeviceChanges) -> Decision:
        """
        Decide whether changes may be applied to a device in current_state.

        Args:
            current_state: State the device is in right now
            changes: Sparse set of requested assignments

        Returns:
            Allowed, or Denied carrying the reason
        """
        touched = set(changes.requested())
        if touched & self.locked_fields(current_state):
            return Denied(RESTRICTED_CHANGE_REASON)
        return Allowed()

    def authorize_delete(self, current_state: DeviceState) -> Decision:
        if current_state in UNDELETABLE_STATES:
            return Denied(RESTRICTED_DELETE_REASON)
        return Allowed()
