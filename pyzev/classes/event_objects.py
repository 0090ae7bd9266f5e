# pyzev/classes/event_objects.py
"""
Logical model of an event file: events, their actors, the actors' steps,
the typed parameters attached to each step, and the wait-for edges between
steps of the same event.

The structural edit methods on `Event` keep the wait-for edges consistent
when steps are inserted or removed.
"""
from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from pyzev.misc.validation import (
    OutOfRangeError,
    check_name_length,
    check_name_size,
)

EVENT_NAME_SIZE = 0x20
ACTOR_NAME_SIZE = 0x20
STEP_LONG_NAME_SIZE = 0x10
SHORT_NAME_SIZE = 4


class DataType(IntEnum):
    """Value kind of a StepData, as stored in the data definition record."""
    INTS = 0
    FLOATS = 1
    STRING = 2


# --- Step parameter data ---
@dataclass
class StepData:
    """One typed parameter of a Step: a list of u32, a list of f32, or a string."""
    name: str
    data_type: DataType
    values: Union[List[int], List[float], str]
    flag: int = 0

    def __post_init__(self):
        check_name_length(self.name, SHORT_NAME_SIZE, "StepData name")
        self.data_type = DataType(self.data_type)
        if self.data_type != DataType.STRING and not isinstance(self.values, (str, bytes)):
            self.values = list(self.values)
        self.check_values()

    def check_values(self):
        """
        Check that `values` holds the variant selected by `data_type`.

        INTS takes integers and FLOATS takes real numbers; bools are rejected
        for both. The u32 range of integers is checked when encoding.

        Raises:
            TypeError: wrong container or element type
            ValueError: unknown data type
        """
        data_type = DataType(self.data_type)
        if data_type == DataType.STRING:
            if not isinstance(self.values, str):
                raise TypeError(f"STRING data expects a str, not {type(self.values).__name__}")
            return
        if not isinstance(self.values, list):
            raise TypeError(f"{data_type.name} data expects a list of numbers, "
                            f"not {type(self.values).__name__}")
        kind = numbers.Integral if data_type == DataType.INTS else numbers.Real
        for value in self.values:
            if isinstance(value, bool) or not isinstance(value, kind):
                raise TypeError(f"{data_type.name} data '{self.name}' cannot hold {value!r}")

    @classmethod
    def ints(cls, name: str, values: List[int], flag: int = 0) -> "StepData":
        return cls(name, DataType.INTS, list(values), flag)

    @classmethod
    def floats(cls, name: str, values: List[float], flag: int = 0) -> "StepData":
        return cls(name, DataType.FLOATS, list(values), flag)

    @classmethod
    def string(cls, name: str, value: str, flag: int = 0) -> "StepData":
        return cls(name, DataType.STRING, value, flag)

    def set_name(self, name: str):
        """Rename the parameter. Data names are exactly 4 ASCII bytes."""
        check_name_size(name, SHORT_NAME_SIZE, "StepData name")
        self.name = name

    def to_dict(self) -> Dict[str, Any]:
        values = self.values if isinstance(self.values, str) else list(self.values)
        return {"name": self.name, "flag": self.flag, "type": self.data_type.name.lower(), "values": values}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StepData":
        return cls(data["name"], DataType[data["type"].upper()], data["values"], data.get("flag", 0))


# --- Step / Actor ---
@dataclass
class Step:
    """A single action of an actor. `name` is the 4 byte short name."""
    long_name: str
    name: str
    flag1: int = 0
    flag2: int = 0
    data: List[StepData] = field(default_factory=list)

    def __post_init__(self):
        check_name_length(self.long_name, STEP_LONG_NAME_SIZE, "Step long name")
        check_name_length(self.name, SHORT_NAME_SIZE, "Step name")

    def set_long_name(self, long_name: str):
        check_name_length(long_name, STEP_LONG_NAME_SIZE, "Step long name")
        self.long_name = long_name

    def set_name(self, name: str):
        check_name_size(name, SHORT_NAME_SIZE, "Step name")
        self.name = name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "long_name": self.long_name,
            "name": self.name,
            "flag1": self.flag1,
            "flag2": self.flag2,
            "data": [d.to_dict() for d in self.data],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Step":
        return cls(
            data["long_name"],
            data["name"],
            data.get("flag1", 0),
            data.get("flag2", 0),
            [StepData.from_dict(d) for d in data.get("data", [])],
        )


@dataclass
class Actor:
    """A participant of an event owning an ordered list of steps."""
    name: str
    flag1: int = 0
    flag2: int = 0
    steps: List[Step] = field(default_factory=list)

    def __post_init__(self):
        check_name_length(self.name, ACTOR_NAME_SIZE, "Actor name")

    def set_name(self, name: str):
        check_name_length(name, ACTOR_NAME_SIZE, "Actor name")
        self.name = name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "flag1": self.flag1,
            "flag2": self.flag2,
            "steps": [s.to_dict() for s in self.steps],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Actor":
        return cls(
            data["name"],
            data.get("flag1", 0),
            data.get("flag2", 0),
            [Step.from_dict(s) for s in data.get("steps", [])],
        )


# --- Wait-for edges ---
@dataclass
class StepRef:
    """Event-local coordinate of a step."""
    actor_idx: int
    step_idx: int

    def matches(self, actor_idx: int, step_idx: int) -> bool:
        return self.actor_idx == actor_idx and self.step_idx == step_idx

    def as_tuple(self) -> Tuple[int, int]:
        return (self.actor_idx, self.step_idx)


@dataclass
class WaitFor:
    """Edge meaning: step `waiting` only starts once `waiting_on` completed."""
    waiting: StepRef
    waiting_on: StepRef

    def to_dict(self) -> Dict[str, Any]:
        return {"waiting": list(self.waiting.as_tuple()), "waiting_on": list(self.waiting_on.as_tuple())}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WaitFor":
        return cls(StepRef(*data["waiting"]), StepRef(*data["waiting_on"]))


def _shift_ref(ref: StepRef, actor_idx: int, from_step: int, delta: int) -> StepRef:
    """New ref moved by `delta` when it sits in `actor_idx` at or after `from_step`."""
    if ref.actor_idx == actor_idx and ref.step_idx >= from_step:
        return StepRef(ref.actor_idx, ref.step_idx + delta)
    return StepRef(ref.actor_idx, ref.step_idx)


# --- Event ---
@dataclass
class Event:
    """
    Top level unit of an event file.

    Attributes:
        name: Event name, up to 32 ASCII bytes
        flag: Opaque byte stored with the event record
        actors: Actors in layout order
        wait_fors: Dependency edges in event-local coordinates. At most one
            edge exists per waiting step.
    """
    name: str
    flag: int = 0
    actors: List[Actor] = field(default_factory=list)
    wait_fors: List[WaitFor] = field(default_factory=list)

    def __post_init__(self):
        check_name_length(self.name, EVENT_NAME_SIZE, "Event name")

    def set_name(self, name: str):
        check_name_length(name, EVENT_NAME_SIZE, "Event name")
        self.name = name

    # --- Lookups ---
    def get_actor_index(self, name: str) -> Optional[int]:
        """Index of the first actor called `name`, or None."""
        for idx, actor in enumerate(self.actors):
            if actor.name == name:
                return idx
        return None

    def get_step_index(self, actor_idx: int, long_name: str) -> Optional[int]:
        """Index of the first step of an actor with the given long name, or None."""
        self._check_actor(actor_idx)
        for idx, step in enumerate(self.actors[actor_idx].steps):
            if step.long_name == long_name:
                return idx
        return None

    def _has_step(self, actor_idx: int, step_idx: int) -> bool:
        if not 0 <= actor_idx < len(self.actors):
            return False
        return 0 <= step_idx < len(self.actors[actor_idx].steps)

    def _check_actor(self, actor_idx: int):
        if not 0 <= actor_idx < len(self.actors):
            raise OutOfRangeError(f"Event '{self.name}' has no actor {actor_idx} ({len(self.actors)} actors)")

    def _check_step(self, actor_idx: int, step_idx: int):
        self._check_actor(actor_idx)
        if not self._has_step(actor_idx, step_idx):
            actor = self.actors[actor_idx]
            raise OutOfRangeError(f"Actor '{actor.name}' has no step {step_idx} ({len(actor.steps)} steps)")

    # --- Wait-for edges ---
    def remove_all_waits(self):
        self.wait_fors.clear()

    def remove_waiting(self, actor_idx: int, step_idx: int):
        """Drop the dependency of the given step, if it has one."""
        self.wait_fors[:] = [w for w in self.wait_fors if not w.waiting.matches(actor_idx, step_idx)]

    def get_waited_on(self, actor_idx: int, step_idx: int) -> Optional[Tuple[int, int]]:
        """Return the (actor, step) the given step waits on, if any."""
        for wait in self.wait_fors:
            if wait.waiting.matches(actor_idx, step_idx):
                return wait.waiting_on.as_tuple()
        return None

    def get_waiting(self, actor_idx: int, step_idx: int) -> Iterator[Tuple[int, int]]:
        """Yield every (actor, step) that waits on the given step."""
        for wait in self.wait_fors:
            if wait.waiting_on.matches(actor_idx, step_idx):
                yield wait.waiting.as_tuple()

    def add_wait(self, waiting_actor_idx: int, waiting_step_idx: int,
                 waited_on_actor_idx: int, waited_on_step_idx: int):
        """
        Make a step wait on another step of this event.

        Any previous dependency of the waiting step is replaced, since a step
        stores a single wait pointer on disk.

        Raises:
            OutOfRangeError: either endpoint does not exist. The edge list is
                left untouched.
        """
        self._check_step(waiting_actor_idx, waiting_step_idx)
        self._check_step(waited_on_actor_idx, waited_on_step_idx)

        self.remove_waiting(waiting_actor_idx, waiting_step_idx)
        self.wait_fors.append(WaitFor(
            waiting=StepRef(waiting_actor_idx, waiting_step_idx),
            waiting_on=StepRef(waited_on_actor_idx, waited_on_step_idx),
        ))

    # --- Step insertion / removal ---
    def add_step(self, actor_idx: int, position: int, step: Step):
        """
        Insert a step into an actor, shifting later edge endpoints of that actor.

        Args:
            actor_idx: Actor to insert into
            position: Insert position, 0..len(steps) inclusive
            step: The Step to insert
        """
        if not isinstance(step, Step):
            raise TypeError(f"step must be a Step dataclass, not {type(step)}")
        self._check_actor(actor_idx)
        steps = self.actors[actor_idx].steps
        if not 0 <= position <= len(steps):
            raise OutOfRangeError(
                f"Cannot insert at {position}: actor '{self.actors[actor_idx].name}' has {len(steps)} steps"
            )

        for wait in self.wait_fors:
            wait.waiting = _shift_ref(wait.waiting, actor_idx, position, 1)
            wait.waiting_on = _shift_ref(wait.waiting_on, actor_idx, position, 1)

        steps.insert(position, step)

    def remove_step(self, actor_idx: int, step_idx: int) -> Step:
        """
        Remove and return a step.

        Edges touching the removed step are deleted, later endpoints of the
        same actor move down by one. Surviving edges keep their order.
        """
        self._check_step(actor_idx, step_idx)

        kept = []
        for wait in self.wait_fors:
            if wait.waiting.matches(actor_idx, step_idx) or wait.waiting_on.matches(actor_idx, step_idx):
                continue
            wait.waiting = _shift_ref(wait.waiting, actor_idx, step_idx + 1, -1)
            wait.waiting_on = _shift_ref(wait.waiting_on, actor_idx, step_idx + 1, -1)
            kept.append(wait)
        self.wait_fors[:] = kept

        return self.actors[actor_idx].steps.pop(step_idx)

    # --- Serialization helpers ---
    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "flag": self.flag,
            "actors": [a.to_dict() for a in self.actors],
            "wait_fors": [w.to_dict() for w in self.wait_fors],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        return cls(
            data["name"],
            data.get("flag", 0),
            [Actor.from_dict(a) for a in data.get("actors", [])],
            [WaitFor.from_dict(w) for w in data.get("wait_fors", [])],
        )


def find_event(events: List[Event], name: str) -> Optional[Event]:
    """Return the event called `name` from a decoded event list, or None."""
    for event in events:
        if event.name == name:
            return event
    return None
