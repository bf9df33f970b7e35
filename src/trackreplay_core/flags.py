"""Start/finish flag placement state machine.

Each flag kind moves through ``Idle -> PickedUp -> Deployed`` and back to
``Idle`` when cleared.  Placement snaps the flag to the globally nearest
point of the visible tracks; once both flags are deployed the controller
asks its owner to synchronise the tracks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Sequence, Union

from .nearest import nearest_point_across_tracks
from .results import OperationResult, invalid_state, not_found, ok
from .tracks import TrackStore

__all__ = [
    "Deployed",
    "FlagController",
    "FlagKind",
    "FlagState",
    "IDLE",
    "Idle",
    "PICKED_UP",
    "PickedUp",
]

logger = logging.getLogger(__name__)


class FlagKind(str, Enum):
    START = "start"
    FINISH = "finish"

    @classmethod
    def parse(cls, value: "FlagKind | str") -> "FlagKind":
        if isinstance(value, FlagKind):
            return value
        return cls(str(value).strip().lower())


@dataclass(frozen=True, slots=True)
class Idle:
    """Flag sitting in the toolbox."""


@dataclass(frozen=True, slots=True)
class PickedUp:
    """Flag held by the user, waiting for a drop position."""


@dataclass(frozen=True, slots=True)
class Deployed:
    """Flag bound to ``(track_index, point_index)`` in the track store."""

    track_index: int
    point_index: int


FlagState = Union[Idle, PickedUp, Deployed]

IDLE = Idle()
PICKED_UP = PickedUp()


def _describe(state: FlagState) -> str:
    if isinstance(state, Idle):
        return "idle"
    if isinstance(state, PickedUp):
        return "picked_up"
    if isinstance(state, Deployed):
        return "deployed"
    raise TypeError(f"unknown flag state {state!r}")


class FlagController:
    """Owns the two flag slots of a session."""

    def __init__(
        self,
        store: TrackStore,
        *,
        on_synchronise: Callable[[], object] | None = None,
        on_reset: Callable[[], object] | None = None,
    ) -> None:
        self._store = store
        self._states: dict[FlagKind, FlagState] = {kind: IDLE for kind in FlagKind}
        self._on_synchronise = on_synchronise
        self._on_reset = on_reset

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def state(self, kind: FlagKind | str) -> FlagState:
        return self._states[FlagKind.parse(kind)]

    @property
    def states(self) -> Mapping[FlagKind, FlagState]:
        return dict(self._states)

    def deployed(self, kind: FlagKind | str) -> Deployed | None:
        state = self.state(kind)
        return state if isinstance(state, Deployed) else None

    @property
    def both_deployed(self) -> bool:
        return all(isinstance(state, Deployed) for state in self._states.values())

    def deployed_positions(self) -> dict[FlagKind, tuple[float, float, float]]:
        """Coordinates of the deployed flags, for marker rendering."""

        positions: dict[FlagKind, tuple[float, float, float]] = {}
        for kind, state in self._states.items():
            if isinstance(state, Deployed):
                track = self._store[state.track_index]
                positions[kind] = track.coordinate(state.point_index)
        return positions

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def pick_up(self, kind: FlagKind | str) -> OperationResult:
        kind = FlagKind.parse(kind)
        state = self._states[kind]
        if not isinstance(state, Idle):
            logger.debug(
                "Flag pick-up ignored",
                extra={"event": "flags.pick_up_ignored", "flag": kind.value, "state": _describe(state)},
            )
            return invalid_state(
                f"{kind.value} flag cannot be picked up while {_describe(state)}",
                flag=kind.value,
                state=_describe(state),
            )
        self._states[kind] = PICKED_UP
        return ok(f"{kind.value} flag picked up", flag=kind.value)

    def place_at(self, kind: FlagKind | str, query_position: Sequence[float]) -> OperationResult:
        """Drop a picked-up flag on the nearest visible track point."""

        kind = FlagKind.parse(kind)
        state = self._states[kind]
        if not isinstance(state, PickedUp):
            logger.debug(
                "Flag placement ignored",
                extra={"event": "flags.place_ignored", "flag": kind.value, "state": _describe(state)},
            )
            return invalid_state(
                f"{kind.value} flag must be picked up before placement",
                flag=kind.value,
                state=_describe(state),
            )

        target = nearest_point_across_tracks(query_position, self._store)
        if target is None:
            self._states[kind] = IDLE
            logger.warning(
                "No track found near flag placement position",
                extra={"event": "flags.not_found", "flag": kind.value},
            )
            return not_found(
                "no visible track to place the flag on",
                flag=kind.value,
            )

        self._states[kind] = Deployed(target.track_index, target.point_index)
        logger.info(
            "Flag deployed",
            extra={
                "event": "flags.deployed",
                "flag": kind.value,
                "track_index": target.track_index,
                "point_index": target.point_index,
                "distance": target.distance,
            },
        )

        synchronised = False
        if self.both_deployed and self._on_synchronise is not None:
            self._on_synchronise()
            synchronised = True
        return ok(
            f"{kind.value} flag deployed",
            flag=kind.value,
            track_index=target.track_index,
            point_index=target.point_index,
            distance=target.distance,
            synchronised=synchronised,
        )

    def move(self, kind: FlagKind | str, query_position: Sequence[float]) -> OperationResult:
        kind = FlagKind.parse(kind)
        self.clear(kind)
        self.pick_up(kind)
        return self.place_at(kind, query_position)

    def clear(self, kind: FlagKind | str) -> OperationResult:
        kind = FlagKind.parse(kind)
        previous = self._states[kind]
        self._states[kind] = IDLE
        return ok(f"{kind.value} flag cleared", flag=kind.value, previous=_describe(previous))

    def clear_all(self) -> OperationResult:
        """Return both flags to the toolbox and drop every synchronised series."""

        for kind in FlagKind:
            self._states[kind] = IDLE
        self._store.clear_synced()
        if self._on_reset is not None:
            self._on_reset()
        logger.info("Flags reset", extra={"event": "flags.reset"})
        return ok("flags cleared")

    def on_track_removed(self, index: int) -> tuple[FlagKind, ...]:
        """Re-resolve flag references after the store dropped track ``index``.

        Flags hosted by the removed track are retracted; flags on later tracks
        follow their track down by one slot.  Returns the retracted kinds.
        """

        retracted: list[FlagKind] = []
        for kind, state in self._states.items():
            if not isinstance(state, Deployed):
                continue
            if state.track_index == index:
                self._states[kind] = IDLE
                retracted.append(kind)
            elif state.track_index > index:
                self._states[kind] = Deployed(state.track_index - 1, state.point_index)
        if retracted:
            logger.info(
                "Flags retracted with removed track",
                extra={
                    "event": "flags.retracted",
                    "track_index": index,
                    "flags": [kind.value for kind in retracted],
                },
            )
        return tuple(retracted)
