"""Base actors and the behaviour state machine that steers them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import numpy as np

from starfighter.camera import Quat


def _zeros3() -> np.ndarray:
    return np.zeros(3)


@dataclass
class Actor:
    """Something in the world with a name, position, velocity and orientation."""

    name: str
    position: np.ndarray = field(default_factory=_zeros3)
    velocity: np.ndarray = field(default_factory=_zeros3)
    orientation: Quat = field(default_factory=Quat)

    def __post_init__(self):
        self.position = np.array(self.position, dtype=float).reshape(3)
        self.velocity = np.array(self.velocity, dtype=float).reshape(3)


class BehaviourState(ABC):
    """One state of an actor's behaviour."""

    def __init__(self):
        self.current_target = np.zeros(3)

    @abstractmethod
    def enter(self):
        """Called when the state becomes current."""

    @abstractmethod
    def execute(self, actor, target_pos, delta_time):
        """Advance the actor while this state is current."""

    @abstractmethod
    def exit(self):
        """Called when the state stops being current."""

    @staticmethod
    def steering_force(actor, target_pos) -> np.ndarray:
        """Force turning the actor's velocity towards ``target_pos``."""
        desired_velocity = np.asarray(target_pos, dtype=float) - actor.position
        return desired_velocity - actor.velocity


class BehaviourStateMachine:
    """Holds the current and previous behaviour states of an actor."""

    def __init__(self, current_state, previous_state=None):
        self.current_state = current_state
        self.previous_state = previous_state

    def update(self, actor, delta_time):
        state = self.current_state
        state.execute(actor, state.current_target, delta_time)

    def change_state(self, new_state):
        self.previous_state = self.current_state
        self.current_state.exit()
        self.current_state = new_state
        self.current_state.enter()

    def change_to_previous_state(self):
        if self.previous_state is None:
            raise RuntimeError("no previous behaviour state")
        self.current_state = self.previous_state