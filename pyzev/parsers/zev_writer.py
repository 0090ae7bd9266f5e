"""
Encoder for event files.

Flattens an event list back into the fixed tables of the file format.

Two orderings are involved:
- every table except the event table follows the order of the event list,
  which fixes the whole-file step indices used by wait pointers;
- the event table itself is written sorted by event name.

Wait pointers are only known once all actors of an event have their step
ranges assigned, so steps are first written with NO_DEPENDENCY and patched
afterwards from a per-event patch list.
"""

import struct
from io import SEEK_END, BytesIO
from pathlib import Path
from typing import List, Tuple, Union

import numpy as np

from pyzev.classes.event_objects import DataType, Event, StepData, StepRef
from pyzev.misc.logger import create_logger
from pyzev.misc.validation import LogicError
from pyzev.parsers.layout import ZevLayout
from pyzev.parsers.raw_records import (
    EV_SENTINEL,
    MAGIC,
    NO_DEPENDENCY,
    STEP1_WAIT_FOR_OFFSET,
    WAIT_FOR_FORMAT,
    RawActor,
    RawDataDef,
    RawEvent,
    RawStep1,
    RawStep2,
)

U32_MAX = 0xFFFFFFFF

# Fixed filler values of the step-part-1 record, as written by the game's tools
STEP1_PAD1 = 0
STEP1_PAD2 = 1


def event_name_key(name: str) -> bytes:
    """
    Sort key of the on-disk event table.

    Names compare byte by byte as zero-terminated strings, so a name that is a
    strict prefix of another sorts first.
    """
    return name.encode("ascii") + b"\x00"


class ZevWriter:
    """
    Encodes an event list into the bytes of an event file.

    Usage:
        data = ZevWriter(events).write()
    """

    def __init__(self, events: List[Event], verbose: bool = False, debug: bool = False):
        self.events = events
        self.logger = create_logger(verbose=verbose, name="Writer", debug=debug)
        self.layout: ZevLayout = None
        self.stream: BytesIO = None

        # Running table positions
        self._actor_idx = 0
        self._step_idx = 0
        self._data_def_idx = 0
        self._int_idx = 0
        self._float_idx = 0
        self._string_idx = 0

    def write(self) -> bytes:
        """
        Encode all events.

        Raises:
            LogicError: the model cannot be represented (a count or index
                overflows its 16 bit field, a wait endpoint does not exist,
                a value has the wrong type or is out of range) or an
                internal invariant broke.
        """
        try:
            return self._write()
        except (struct.error, ValueError, OverflowError, TypeError) as exc:
            raise LogicError(f"unexpected write error: {exc}") from exc

    def _check_values(self):
        """Re-check every parameter value; lists may have been edited after construction."""
        for event in self.events:
            for actor in event.actors:
                for step in actor.steps:
                    for data in step.data:
                        try:
                            data.check_values()
                        except TypeError as exc:
                            raise LogicError(
                                f"event '{event.name}', step '{step.long_name}': {exc}"
                            ) from exc
                        if data.data_type == DataType.INTS and any(not 0 <= v <= U32_MAX for v in data.values):
                            raise LogicError(f"integer data '{data.name}' holds values outside the u32 range")

    def _write(self) -> bytes:
        self._check_values()
        self.layout = ZevLayout.from_events(self.events)
        self.logger.debug(", ".join(f"{name} @ {offset:#x}" for name, offset in self.layout.offsets.items()))
        # Pre-sized buffer; every record below is written at an absolute position
        self.stream = BytesIO(bytes(self.layout.total_size))
        self.layout.to_header(MAGIC, EV_SENTINEL).write(self.stream)

        raw_events = []
        patched = 0
        for event in self.events:
            raw_events.append(RawEvent(
                name=event.name,
                pad1=0,
                flag=event.flag,
                pad2=0,
                actor_index=self._actor_idx,
                actor_count=len(event.actors),
            ))
            actor_step_starts = self._write_actors(event)
            patched += self._patch_wait_pointers(event, actor_step_starts)

        self.stream.seek(self.layout.offsets["events"])
        for raw_event in sorted(raw_events, key=lambda e: event_name_key(e.name)):
            raw_event.write(self.stream)

        self._check_complete()
        self.logger.info(
            f"Encoded {len(self.events)} events, {self._step_idx} steps, "
            f"{patched} wait pointers ({self.layout.total_size} bytes)"
        )
        return self.stream.getvalue()

    def _write_actors(self, event: Event) -> List[int]:
        """Write the actors and steps of one event; returns each actor's first global step index."""
        actor_step_starts = []
        for actor in event.actors:
            actor_step_starts.append(self._step_idx)

            self.stream.seek(self.layout.actor_pos(self._actor_idx))
            RawActor(
                name=actor.name,
                flag1=actor.flag1,
                flag2=actor.flag2,
                step_index=self._step_idx,
                step_count=len(actor.steps),
            ).write(self.stream)

            for step in actor.steps:
                self.stream.seek(self.layout.step1_pos(self._step_idx))
                RawStep1(
                    long_name=step.long_name,
                    wait_for=NO_DEPENDENCY,
                    actor_index=self._actor_idx,
                    flag=step.flag1,
                    pad1=STEP1_PAD1,
                    this_index=self._step_idx,
                    pad2=STEP1_PAD2,
                ).write(self.stream)

                self.stream.seek(self.layout.step2_pos(self._step_idx))
                RawStep2(
                    name=step.name,
                    flag=step.flag2,
                    this_index=self._step_idx,
                    data_def_index=self._data_def_idx,
                    data_def_count=len(step.data),
                ).write(self.stream)
                self._step_idx += 1

                for data in step.data:
                    data_index, data_len = self._write_values(data)
                    self.stream.seek(self.layout.data_def_pos(self._data_def_idx))
                    RawDataDef(
                        name=data.name,
                        flag=data.flag,
                        data_type=int(data.data_type),
                        data_index=data_index,
                        data_len=data_len,
                    ).write(self.stream)
                    self._data_def_idx += 1

            self._actor_idx += 1
        return actor_step_starts

    def _write_values(self, data: StepData) -> Tuple[int, int]:
        """Append a value to its blob; returns (start index, length) for the data definition."""
        if data.data_type == DataType.INTS:
            index = self._int_idx
            self.stream.seek(self.layout.int_pos(index))
            self.stream.write(np.asarray(data.values, dtype=">u4").tobytes())
            self._int_idx += len(data.values)
            return index, len(data.values)

        if data.data_type == DataType.FLOATS:
            index = self._float_idx
            self.stream.seek(self.layout.float_pos(index))
            self.stream.write(np.asarray(data.values, dtype=">f4").tobytes())
            self._float_idx += len(data.values)
            return index, len(data.values)

        raw = data.values.encode("utf-8") + b"\x00"
        index = self._string_idx
        self.stream.seek(self.layout.string_pos(index))
        self.stream.write(raw)
        self._string_idx += len(raw)
        return index, len(raw)

    def _global_step_index(self, event: Event, ref: StepRef, actor_step_starts: List[int]) -> int:
        if not 0 <= ref.actor_idx < len(event.actors):
            raise LogicError(f"wait edge in event '{event.name}' references missing actor {ref.actor_idx}")
        if not 0 <= ref.step_idx < len(event.actors[ref.actor_idx].steps):
            raise LogicError(
                f"wait edge in event '{event.name}' references missing step {ref.as_tuple()}"
            )
        return actor_step_starts[ref.actor_idx] + ref.step_idx

    def _patch_wait_pointers(self, event: Event, actor_step_starts: List[int]) -> int:
        """Overwrite the NO_DEPENDENCY placeholders of this event's waiting steps."""
        patches = []
        for wait in event.wait_fors:
            waiting_idx = self._global_step_index(event, wait.waiting, actor_step_starts)
            waiting_on_idx = self._global_step_index(event, wait.waiting_on, actor_step_starts)
            patches.append((waiting_idx, waiting_on_idx))

        for waiting_idx, waiting_on_idx in patches:
            self.logger.debug(f"patch step {waiting_idx}: waits on step {waiting_on_idx}")
            self.stream.seek(self.layout.step1_pos(waiting_idx) + STEP1_WAIT_FOR_OFFSET)
            self.stream.write(WAIT_FOR_FORMAT.pack(waiting_on_idx))
        return len(patches)

    def _check_complete(self):
        written = {
            "actors": (self._actor_idx, self.layout.actor_count),
            "steps": (self._step_idx, self.layout.step_count),
            "data definitions": (self._data_def_idx, self.layout.data_def_count),
            "integers": (self._int_idx, self.layout.int_count),
            "floats": (self._float_idx, self.layout.float_count),
            "string bytes": (self._string_idx, self.layout.string_size),
        }
        for what, (actual, expected) in written.items():
            if actual != expected:
                raise LogicError(f"wrote {actual} {what}, layout expected {expected}")
        size = self.stream.seek(0, SEEK_END)
        if size != self.layout.total_size:
            raise LogicError(f"output is {size} bytes, layout expected {self.layout.total_size}")


def write_zev(events: List[Event], verbose: bool = False, debug: bool = False) -> bytes:
    """Encode an event list into file bytes."""
    return ZevWriter(events, verbose=verbose, debug=debug).write()


def save_zev(path: Union[str, Path], events: List[Event], verbose: bool = False) -> Path:
    """Encode an event list and write it to disk."""
    data = write_zev(events, verbose=verbose)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)
    create_logger(verbose=verbose, name="Writer").info(f"Saved {len(events)} events to '{path}'")
    return path
