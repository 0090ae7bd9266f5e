"""Unit tests for encoding event files."""

from io import BytesIO
from pathlib import Path
from typing import List

import pytest

from pyzev import (
    Actor,
    Event,
    LogicError,
    Step,
    StepData,
    StepRef,
    WaitFor,
    ZevLayout,
    save_zev,
    write_zev,
)
from pyzev.parsers.raw_records import (
    EV_SENTINEL,
    MAGIC,
    NO_DEPENDENCY,
    RawDataDef,
    RawEvent,
    RawHeader,
    RawStep1,
    RawStep2,
)
from pyzev.parsers.zev_writer import event_name_key


def _read_at(data: bytes, position: int, record):
    stream = BytesIO(data)
    stream.seek(position)
    return record.read(stream)


def _event_table(data: bytes, layout: ZevLayout) -> List[RawEvent]:
    return [_read_at(data, layout.event_pos(i), RawEvent) for i in range(layout.event_count)]


def _one_actor_event(name: str) -> Event:
    return Event(name, actors=[Actor("A", steps=[Step("S", "ssss")])])


def test_header_counts(events: List[Event]) -> None:
    """Test header counts match the model and the buffer length matches the layout."""
    data = write_zev(events)
    layout = ZevLayout.from_events(events)
    header = RawHeader.read(BytesIO(data))

    assert len(data) == layout.total_size
    assert header.magic == MAGIC
    assert header.always_ev == EV_SENTINEL
    assert header.event_count == 2
    assert header.actor_count == 3
    assert header.steps_count == header.steps2_count == 6
    assert header.data_def_count == 6
    assert header.int_count == 4
    assert header.float_count == 4
    assert header.string_count == 7


def test_event_table_sorted_by_name() -> None:
    """Test "B" then "Aa" is stored as "Aa", "B" while layout keeps construction order."""
    events = [_one_actor_event("B"), _one_actor_event("Aa")]
    data = write_zev(events)
    table = _event_table(data, ZevLayout.from_events(events))

    assert [e.name for e in table] == ["Aa", "B"]
    assert {e.name: e.actor_index for e in table} == {"B": 0, "Aa": 1}


def test_prefix_name_sorts_first() -> None:
    """Test a strict prefix sorts before the longer name."""
    events = [_one_actor_event("Ab"), _one_actor_event("A"), _one_actor_event("A0")]
    data = write_zev(events)
    table = _event_table(data, ZevLayout.from_events(events))

    assert [e.name for e in table] == ["A", "A0", "Ab"]
    assert event_name_key("A") < event_name_key("AB")


def test_wait_pointers_patched(gossip_event: Event) -> None:
    """Test wait pointers hold global step indices and other steps hold the sentinel."""
    data = write_zev([gossip_event])
    layout = ZevLayout.from_events([gossip_event])
    steps = [_read_at(data, layout.step1_pos(i), RawStep1) for i in range(layout.step_count)]

    # Link owns global steps 0..2, Camera 3..4
    assert [s.wait_for for s in steps] == [NO_DEPENDENCY, 3, NO_DEPENDENCY, NO_DEPENDENCY, 2]
    assert [s.actor_index for s in steps] == [0, 0, 0, 1, 1]
    assert [s.this_index for s in steps] == [0, 1, 2, 3, 4]
    assert all(s.pad1 == 0 and s.pad2 == 1 for s in steps)


def test_wait_pointers_use_file_wide_indices(events: List[Event]) -> None:
    """Test pointers of a later event are offset by the steps of earlier events."""
    events[1].actors[0].steps.append(Step("Go", "gogo"))
    events[1].add_wait(0, 1, 0, 0)
    data = write_zev(events)
    layout = ZevLayout.from_events(events)

    assert _read_at(data, layout.step1_pos(6), RawStep1).wait_for == 5


def test_step2_and_data_def_ranges(gossip_event: Event) -> None:
    """Test data definition ranges and blob indices are assigned sequentially."""
    data = write_zev([gossip_event])
    layout = ZevLayout.from_events([gossip_event])
    steps2 = [_read_at(data, layout.step2_pos(i), RawStep2) for i in range(layout.step_count)]
    defs = [_read_at(data, layout.data_def_pos(i), RawDataDef) for i in range(layout.data_def_count)]

    assert [(s.data_def_index, s.data_def_count) for s in steps2] == [(0, 1), (1, 1), (2, 1), (3, 0), (3, 2)]
    assert [(d.data_type, d.data_index, d.data_len) for d in defs] == [
        (0, 0, 3),
        (1, 0, 3),
        (2, 0, 6),
        (0, 3, 1),
        (2, 6, 1),
    ]
    assert data[layout.offsets["strings"]:] == b"hello\x00\x00"
    assert data[layout.int_pos(3):layout.int_pos(4)] == b"\x00\x00\x00\x1e"


def test_empty_event_list() -> None:
    """Test no events encode to a bare header."""
    data = write_zev([])

    assert len(data) == RawHeader.SIZE
    assert RawHeader.read(BytesIO(data)).event_count == 0


def test_dangling_wait_edge_is_logic_error(gossip_event: Event) -> None:
    """Test an edge to a missing actor fails loudly."""
    gossip_event.wait_fors.append(WaitFor(StepRef(0, 0), StepRef(5, 0)))

    with pytest.raises(LogicError, match="missing actor"):
        write_zev([gossip_event])


def test_int_out_of_range_is_logic_error() -> None:
    """Test integers outside u32 cannot be written."""
    events = [Event("E", actors=[Actor("A", steps=[Step("S", "ssss", data=[StepData.ints("Numb", [-1])])])])]

    with pytest.raises(LogicError):
        write_zev(events)


@pytest.mark.parametrize("bad_value", [1.5, "1", True])
def test_non_integer_value_is_logic_error(bad_value) -> None:
    """Test integer data edited to hold a non-integer is rejected, not truncated."""
    data = StepData.ints("Numb", [1])
    data.values.append(bad_value)
    events = [Event("E", actors=[Actor("A", steps=[Step("S", "ssss", data=[data])])])]

    with pytest.raises(LogicError):
        write_zev(events)


def test_wrong_value_container_is_logic_error() -> None:
    """Test swapped value containers fail as LogicError before layout."""
    text = StepData.string("Text", "hi")
    text.values = ["hi"]
    floats = StepData.floats("Flts", [0.5])
    floats.values = "0.5"

    for data in (text, floats):
        events = [Event("E", actors=[Actor("A", steps=[Step("S", "ssss", data=[data])])])]
        with pytest.raises(LogicError):
            write_zev(events)


def test_debug_logs_layout(capsys: pytest.CaptureFixture, gossip_event: Event) -> None:
    """Test debug output lists section offsets and patched pointers."""
    write_zev([gossip_event], debug=True)

    out = capsys.readouterr().out
    assert "[pyzev] [Writer] DEBUG: header @ 0x0, events @ 0x14" in out
    assert "[pyzev] [Writer] DEBUG: patch step 1: waits on step 3" in out
    assert "[pyzev] [Writer] Encoded 1 events" in out


def test_overlong_name_is_logic_error() -> None:
    """Test a name bypassing validation is never truncated."""
    event = _one_actor_event("Fine")
    event.name = "x" * 33

    with pytest.raises(LogicError):
        write_zev([event])


def test_flag_overflow_is_logic_error() -> None:
    """Test a byte flag above 255 cannot be written."""
    event = _one_actor_event("Flagged")
    event.flag = 0x100

    with pytest.raises(LogicError):
        write_zev([event])


def test_save_zev(tmp_path: Path, events: List[Event]) -> None:
    """Test saving writes the encoded bytes."""
    path = save_zev(tmp_path / "out" / "test_zev.dat", events)

    assert path.read_bytes() == write_zev(events)
