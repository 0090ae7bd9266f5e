"""
Decoder for event files (.dat "wZ" containers).

Reads the flat tables of a file and rebuilds the event graph. Wait pointers
stored as whole-file step indices are resolved into event-local
(actor, step) coordinates.
"""

from io import BytesIO
from pathlib import Path
from typing import List, Tuple, Union

import numpy as np

from pyzev.classes.event_objects import (
    Actor,
    DataType,
    Event,
    Step,
    StepData,
    StepRef,
    WaitFor,
)
from pyzev.misc.logger import create_logger
from pyzev.misc.validation import InvalidFileError, InvalidHeaderError
from pyzev.parsers.layout import FLOAT_SIZE, INT_SIZE, ZevLayout
from pyzev.parsers.raw_records import (
    EV_SENTINEL,
    MAGIC,
    RawActor,
    RawDataDef,
    RawEvent,
    RawHeader,
    RawStep1,
    RawStep2,
    read_exact,
)


class ZevReader:
    """
    Decodes one in-memory event file.

    Usage:
        events = ZevReader(data).read()
    """

    def __init__(self, data: bytes, verbose: bool = False, debug: bool = False):
        self.data = bytes(data)
        self.stream = BytesIO(self.data)
        self.logger = create_logger(verbose=verbose, name="Reader", debug=debug)
        self.layout: ZevLayout = None

    def read(self) -> List[Event]:
        """
        Decode all events.

        Returns:
            Events in actor-table order (the order their actors are laid out in)

        Raises:
            InvalidHeaderError: magic, step count or sentinel check failed
            InvalidFileError: anything inconsistent past the header
        """
        header = self._read_header()
        self.layout = ZevLayout.from_header(header)
        if self.layout.total_size != len(self.data):
            raise InvalidFileError(
                f"expected file len of {self.layout.total_size}, got {len(self.data)}"
            )
        self.logger.debug(", ".join(f"{name} @ {offset:#x}" for name, offset in self.layout.offsets.items()))
        self.logger.info(
            f"{header.event_count} events, {header.actor_count} actors, "
            f"{header.steps_count} steps, {header.data_def_count} data definitions"
        )

        raw_events = []
        for event_idx in range(header.event_count):
            self.stream.seek(self.layout.event_pos(event_idx))
            raw_events.append(RawEvent.read(self.stream))
        # The event table is sorted by name; actor ranges are contiguous in actor order.
        # Empty events share their start with the next event and go first
        raw_events.sort(key=lambda e: (e.actor_index, e.actor_count))

        events = [self._read_event(raw_event) for raw_event in raw_events]
        self.logger.info(f"Decoded {len(events)} events ({len(self.data)} bytes)")
        return events

    def _read_header(self) -> RawHeader:
        header = RawHeader.read(self.stream)
        if header.magic != MAGIC:
            raise InvalidHeaderError(
                f"Wrong magic, expected {MAGIC:#06x} got {header.magic:#06x}",
                expected=MAGIC, actual=header.magic,
            )
        if header.steps_count != header.steps2_count:
            raise InvalidHeaderError(
                f"steps1 and steps2 don't have the same count: {header.steps_count} != {header.steps2_count}",
                expected=header.steps_count, actual=header.steps2_count,
            )
        if header.always_ev != EV_SENTINEL:
            raise InvalidHeaderError(
                f"Wrong sentinel, expected {EV_SENTINEL:#06x} got {header.always_ev:#06x}",
                expected=EV_SENTINEL, actual=header.always_ev,
            )
        return header

    @staticmethod
    def _check_range(start: int, count: int, limit: int, what: str):
        if start + count > limit:
            raise InvalidFileError(f"{what} range {start}..{start + count} exceeds table size {limit}")

    def _read_event(self, raw_event: RawEvent) -> Event:
        self._check_range(raw_event.actor_index, raw_event.actor_count, self.layout.actor_count,
                          f"actor range of event '{raw_event.name}'")
        actors = []
        wait_fors = []
        for actor_idx in range(raw_event.actor_index, raw_event.actor_index + raw_event.actor_count):
            self.stream.seek(self.layout.actor_pos(actor_idx))
            raw_actor = RawActor.read(self.stream)
            self._check_range(raw_actor.step_index, raw_actor.step_count, self.layout.step_count,
                              f"step range of actor '{raw_actor.name}'")

            steps = []
            for step_idx in range(raw_actor.step_index, raw_actor.step_index + raw_actor.step_count):
                step, wait_for = self._read_step(step_idx)
                steps.append(step)
                if wait_for >= 0:
                    waiting = StepRef(actor_idx - raw_event.actor_index, step_idx - raw_actor.step_index)
                    waiting_on = self._resolve_wait(wait_for, raw_event)
                    wait_fors.append(WaitFor(waiting=waiting, waiting_on=waiting_on))

            actors.append(Actor(
                name=raw_actor.name,
                flag1=raw_actor.flag1,
                flag2=raw_actor.flag2,
                steps=steps,
            ))

        if not actors:
            self.logger.warning(f"Event '{raw_event.name}' has no actors")
        return Event(name=raw_event.name, flag=raw_event.flag, actors=actors, wait_fors=wait_fors)

    def _read_step(self, step_idx: int) -> Tuple[Step, int]:
        """Read both halves of a global step; returns the step and its raw wait pointer."""
        self.stream.seek(self.layout.step1_pos(step_idx))
        step1 = RawStep1.read(self.stream)
        self.stream.seek(self.layout.step2_pos(step_idx))
        step2 = RawStep2.read(self.stream)
        self._check_range(step2.data_def_index, step2.data_def_count, self.layout.data_def_count,
                          f"data range of step '{step1.long_name}'")

        data = []
        for data_def_idx in range(step2.data_def_index, step2.data_def_index + step2.data_def_count):
            self.stream.seek(self.layout.data_def_pos(data_def_idx))
            data.append(self._read_data(RawDataDef.read(self.stream)))

        step = Step(
            long_name=step1.long_name,
            name=step2.name,
            flag1=step1.flag,
            flag2=step2.flag,
            data=data,
        )
        return step, step1.wait_for

    def _read_data(self, data_def: RawDataDef) -> StepData:
        if data_def.data_type == DataType.INTS:
            self._check_range(data_def.data_index, data_def.data_len, self.layout.int_count,
                              f"integer data '{data_def.name}'")
            self.stream.seek(self.layout.int_pos(data_def.data_index))
            raw = read_exact(self.stream, data_def.data_len * INT_SIZE, "integer data")
            return StepData.ints(data_def.name, np.frombuffer(raw, dtype=">u4").tolist(), data_def.flag)

        if data_def.data_type == DataType.FLOATS:
            self._check_range(data_def.data_index, data_def.data_len, self.layout.float_count,
                              f"float data '{data_def.name}'")
            self.stream.seek(self.layout.float_pos(data_def.data_index))
            raw = read_exact(self.stream, data_def.data_len * FLOAT_SIZE, "float data")
            return StepData.floats(data_def.name, np.frombuffer(raw, dtype=">f4").tolist(), data_def.flag)

        if data_def.data_type == DataType.STRING:
            self._check_range(data_def.data_index, data_def.data_len, self.layout.string_size,
                              f"string data '{data_def.name}'")
            self.stream.seek(self.layout.string_pos(data_def.data_index))
            raw = read_exact(self.stream, data_def.data_len, "string data")
            if not raw or raw[-1] != 0:
                raise InvalidFileError(f"error string value not null terminated: {raw!r}")
            try:
                value = raw[:-1].decode("utf-8")
            except UnicodeDecodeError as exc:
                raise InvalidFileError(f"error parsing string value: {raw[:-1]!r}") from exc
            return StepData.string(data_def.name, value, data_def.flag)

        raise InvalidFileError(f"invalid datatype: {data_def.data_type}")

    def _resolve_wait(self, wait_for: int, raw_event: RawEvent) -> StepRef:
        """Turn a whole-file step index into a (actor, step) pair local to raw_event."""
        if wait_for >= self.layout.step_count:
            raise InvalidFileError(f"wait pointer {wait_for} outside step table ({self.layout.step_count} steps)")
        self.stream.seek(self.layout.step1_pos(wait_for))
        target_step = RawStep1.read(self.stream)
        if target_step.actor_index >= self.layout.actor_count:
            raise InvalidFileError(f"step {wait_for} references missing actor {target_step.actor_index}")
        self.stream.seek(self.layout.actor_pos(target_step.actor_index))
        target_actor = RawActor.read(self.stream)

        actor_idx = target_step.actor_index - raw_event.actor_index
        step_idx = wait_for - target_actor.step_index
        if not 0 <= actor_idx < raw_event.actor_count or not 0 <= step_idx < target_actor.step_count:
            raise InvalidFileError(
                f"wait pointer {wait_for} in event '{raw_event.name}' points outside the event"
            )
        return StepRef(actor_idx, step_idx)


def parse_zev(data: bytes, verbose: bool = False, debug: bool = False) -> List[Event]:
    """Decode an event file held in memory."""
    return ZevReader(data, verbose=verbose, debug=debug).read()


def load_zev(path: Union[str, Path], verbose: bool = False) -> List[Event]:
    """Read and decode an event file from disk."""
    path = Path(path)
    data = path.read_bytes()
    logger = create_logger(verbose=verbose, name="Reader")
    logger.info(f"Loading '{path}' ({len(data)} bytes)")
    return parse_zev(data, verbose=verbose)
