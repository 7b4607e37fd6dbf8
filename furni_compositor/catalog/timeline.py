"""Animation timelines.

An :class:`AnimationTimeline` maps each layer to the states / animations it
takes part in. Each :class:`AnimationState` is the declared frame-id sequence
for that layer, which may be shorter than other layers' sequences for the same
animation (shorter sequences loop inside the longer master timeline).
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from pyrsistent import pmap
from pyrsistent.typing import PMap

from furni_compositor.types import FrameID, LayerID, StateID


@dataclass(frozen=True)
class AnimationState:
    """Ordered frame ids for one layer in one state.

    Attributes:
        frames: Frame ids in playback order (not necessarily contiguous).
        frame_repeat: Playback speed hint, ``None`` when undeclared.
        loop_count: Declared loop count, informational only.
    """

    frames: Tuple[FrameID, ...] = ()
    frame_repeat: Optional[int] = None
    loop_count: Optional[int] = None

    def __len__(self) -> int:
        return len(self.frames)


@dataclass(frozen=True)
class SelectedAnimation:
    layer: LayerID
    state_id: StateID
    state: AnimationState


@dataclass(frozen=True)
class AnimationTimeline:
    """Immutable ``layer -> state id -> AnimationState`` map."""

    layers: PMap[LayerID, PMap[StateID, AnimationState]] = pmap()

    def get(self, layer: LayerID, state_id: StateID) -> Optional[AnimationState]:
        states = self.layers.get(layer)
        if states is None:
            return None
        return states.get(state_id)

    def iter_states(self) -> Iterator[SelectedAnimation]:
        """Yield every (layer, state) pair ordered by layer then state id."""
        for layer in sorted(self.layers):
            states = self.layers[layer]
            for state_id in sorted(states):
                yield SelectedAnimation(layer, state_id, states[state_id])

    def richest(self) -> Optional[SelectedAnimation]:
        """The (layer, state) with the longest sequence; first one wins ties."""
        best: Optional[SelectedAnimation] = None
        for candidate in self.iter_states():
            if best is None or len(candidate.state) > len(best.state):
                best = candidate
        return best

    @property
    def state_ids(self) -> Tuple[StateID, ...]:
        return tuple(sorted({sel.state_id for sel in self.iter_states()}))

    @property
    def max_states(self) -> int:
        """Number of addressable states (highest declared id + 1, at least 1)."""
        ids = self.state_ids
        return ids[-1] + 1 if ids else 1
