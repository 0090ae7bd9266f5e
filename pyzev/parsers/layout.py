"""Section offsets of an event file, derived from its element counts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from pyzev.classes.event_objects import DataType, Event
from pyzev.parsers.raw_records import (
    RawActor,
    RawDataDef,
    RawEvent,
    RawHeader,
    RawStep1,
    RawStep2,
)

INT_SIZE = 4
FLOAT_SIZE = 4

# Section order inside the file; offsets are a running sum in this order
SECTIONS = ("header", "events", "actors", "steps1", "steps2", "data_defs", "ints", "floats", "strings")


@dataclass
class ZevLayout:
    """
    Counts of every table/blob and the byte offsets they imply.

    `string_size` is the byte size of the string blob, terminators included.
    """
    event_count: int = 0
    actor_count: int = 0
    step_count: int = 0
    data_def_count: int = 0
    int_count: int = 0
    float_count: int = 0
    string_size: int = 0
    offsets: Dict[str, int] = field(init=False, repr=False)
    total_size: int = field(init=False)

    def __post_init__(self):
        sizes = [
            RawHeader.SIZE,
            self.event_count * RawEvent.SIZE,
            self.actor_count * RawActor.SIZE,
            self.step_count * RawStep1.SIZE,
            self.step_count * RawStep2.SIZE,
            self.data_def_count * RawDataDef.SIZE,
            self.int_count * INT_SIZE,
            self.float_count * FLOAT_SIZE,
            self.string_size,
        ]
        self.offsets = {}
        position = 0
        for name, size in zip(SECTIONS, sizes):
            self.offsets[name] = position
            position += size
        self.total_size = position

    @classmethod
    def from_header(cls, header: RawHeader) -> "ZevLayout":
        return cls(
            event_count=header.event_count,
            actor_count=header.actor_count,
            step_count=header.steps_count,
            data_def_count=header.data_def_count,
            int_count=header.int_count,
            float_count=header.float_count,
            string_size=header.string_count,
        )

    @classmethod
    def from_events(cls, events: List[Event]) -> "ZevLayout":
        """Count every element of an in-memory event list."""
        layout = dict(event_count=len(events), actor_count=0, step_count=0, data_def_count=0,
                      int_count=0, float_count=0, string_size=0)
        for event in events:
            layout["actor_count"] += len(event.actors)
            for actor in event.actors:
                layout["step_count"] += len(actor.steps)
                for step in actor.steps:
                    layout["data_def_count"] += len(step.data)
                    for data in step.data:
                        if data.data_type == DataType.INTS:
                            layout["int_count"] += len(data.values)
                        elif data.data_type == DataType.FLOATS:
                            layout["float_count"] += len(data.values)
                        else:
                            layout["string_size"] += len(data.values.encode("utf-8")) + 1
        return cls(**layout)

    def to_header(self, magic: int, ev_sentinel: int) -> RawHeader:
        return RawHeader(
            magic=magic,
            event_count=self.event_count,
            actor_count=self.actor_count,
            steps_count=self.step_count,
            steps2_count=self.step_count,
            data_def_count=self.data_def_count,
            always_ev=ev_sentinel,
            int_count=self.int_count,
            float_count=self.float_count,
            string_count=self.string_size,
        )

    # --- Record positions ---
    def event_pos(self, index: int) -> int:
        return self.offsets["events"] + index * RawEvent.SIZE

    def actor_pos(self, index: int) -> int:
        return self.offsets["actors"] + index * RawActor.SIZE

    def step1_pos(self, index: int) -> int:
        return self.offsets["steps1"] + index * RawStep1.SIZE

    def step2_pos(self, index: int) -> int:
        return self.offsets["steps2"] + index * RawStep2.SIZE

    def data_def_pos(self, index: int) -> int:
        return self.offsets["data_defs"] + index * RawDataDef.SIZE

    def int_pos(self, index: int) -> int:
        return self.offsets["ints"] + index * INT_SIZE

    def float_pos(self, index: int) -> int:
        return self.offsets["floats"] + index * FLOAT_SIZE

    def string_pos(self, index: int) -> int:
        return self.offsets["strings"] + index
