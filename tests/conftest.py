"""Test configuration and fixtures."""

from typing import List, Set, Tuple

import pytest

from pyzev import Actor, Event, Step, StepData


def wait_edges(event: Event) -> Set[Tuple[Tuple[int, int], Tuple[int, int]]]:
    """Edges of an event as a set of ((actor, step), (actor, step)) pairs."""
    return {(w.waiting.as_tuple(), w.waiting_on.as_tuple()) for w in event.wait_fors}


@pytest.fixture
def gossip_event() -> Event:
    """Two actors, every data type, and two wait edges."""
    link = Actor("Link", flag1=2, flag2=0x16, steps=[
        Step("Cast", "cast", flag1=0, flag2=5, data=[StepData.ints("Numb", [1, 2, 0xFFFFFFFF])]),
        Step("Walk", "walk", flag1=1, data=[StepData.floats("PosX", [1.5, -2.25, 0.0])]),
        Step("Talk", "talk", data=[StepData.string("Text", "hello", flag=3)]),
    ])
    camera = Actor("Camera", steps=[
        Step("FadeIn", "fdin"),
        Step("FadeOut", "fdot", data=[StepData.ints("Time", [30]), StepData.string("Mode", "")]),
    ])
    event = Event("BackstairsGossip", flag=0x52, actors=[link, camera])
    event.add_wait(0, 1, 1, 0)
    event.add_wait(1, 1, 0, 2)
    return event


@pytest.fixture
def player_event() -> Event:
    return Event("Aa", flag=1, actors=[
        Actor("@player", steps=[Step("Wait", "wait", data=[StepData.floats("Secs", [0.5])])]),
    ])


@pytest.fixture
def events(gossip_event: Event, player_event: Event) -> List[Event]:
    """Construction order differs from name order ("BackstairsGossip" > "Aa")."""
    return [gossip_event, player_event]


@pytest.fixture
def three_step_event() -> Event:
    """One actor with three steps and a second actor with two."""
    return Event("Chain", actors=[
        Actor("X", steps=[Step("S0", "s000"), Step("S1", "s001"), Step("S2", "s002")]),
        Actor("Y", steps=[Step("T0", "t000"), Step("T1", "t001")]),
    ])
