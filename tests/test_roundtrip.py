"""Round trip properties of the codec."""

from typing import List

from pyzev import Actor, Event, Step, StepData, parse_zev, write_zev
from tests.conftest import wait_edges


def test_encode_decode_fixed_point(events: List[Event]) -> None:
    """Test encode(decode(b)) == b for encoder output."""
    data = write_zev(events)

    assert write_zev(parse_zev(data)) == data


def test_redecode_is_structurally_equal(events: List[Event]) -> None:
    """Test decode(encode(decode(b))) equals decode(b)."""
    first = parse_zev(write_zev(events))
    second = parse_zev(write_zev(first))

    assert second == first


def test_decode_matches_original_model(events: List[Event]) -> None:
    """Test the decoded graph matches the model it was encoded from."""
    decoded = parse_zev(write_zev(events))

    for original, restored in zip(events, decoded):
        assert restored.name == original.name
        assert restored.flag == original.flag
        assert restored.actors == original.actors
        assert wait_edges(restored) == wait_edges(original)


def test_fixed_point_with_empty_events() -> None:
    """Test empty events anywhere in the list keep the bytes stable."""
    events = [
        Event("Zz"),
        Event("Aa", actors=[Actor("A", steps=[Step("S", "ssss")])]),
        Event("Mm"),
        Event("Bb", actors=[Actor("B")]),
        Event("Cc"),
    ]
    data = write_zev(events)

    assert write_zev(parse_zev(data)) == data


def test_float_values_are_single_precision() -> None:
    """Test floats are stored as f32 and then stay stable."""
    events = [Event("F", actors=[Actor("A", steps=[
        Step("S", "ssss", data=[StepData.floats("Vals", [0.1, 1e-3, -123456.789])]),
    ])])]
    data = write_zev(events)
    values = parse_zev(data)[0].actors[0].steps[0].data[0].values

    assert values[0] != 0.1
    assert abs(values[0] - 0.1) < 1e-7
    assert write_zev(parse_zev(data)) == data


def test_mutated_graph_roundtrip(gossip_event: Event) -> None:
    """Test an edited event encodes and decodes with consistent edges."""
    gossip_event.add_step(0, 0, Step("Intro", "intr"))
    gossip_event.remove_step(1, 0)
    gossip_event.add_wait(0, 0, 1, 0)
    decoded = parse_zev(write_zev([gossip_event]))[0]

    assert [s.long_name for s in decoded.actors[0].steps] == ["Intro", "Cast", "Walk", "Talk"]
    assert [s.long_name for s in decoded.actors[1].steps] == ["FadeOut"]
    assert wait_edges(decoded) == {((1, 0), (0, 3)), ((0, 0), (1, 0))}


def test_utf8_string_value_roundtrip() -> None:
    """Test string values are counted in encoded bytes, not characters."""
    events = [Event("U", actors=[Actor("A", steps=[
        Step("S", "ssss", data=[StepData.string("Text", "café")]),
    ])])]
    data = write_zev(events)

    assert parse_zev(data)[0].actors[0].steps[0].data[0].values == "café"
    assert write_zev(parse_zev(data)) == data
