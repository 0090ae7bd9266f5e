"""
Text exports of a single event: a JSON summary / full dump and a Graphviz
DOT graph of its steps and wait-for edges.
"""

import json
from typing import Any, Dict

from pyzev.classes.event_objects import Event


def event_summary(event: Event) -> Dict[str, Any]:
    """
    Structured overview of an event.

    Per actor and step: long name, short name, position, and the
    (actor, step) the step waits on, if any.
    """
    actors = []
    for actor_idx, actor in enumerate(event.actors):
        steps = []
        for step_idx, step in enumerate(actor.steps):
            waited_on = event.get_waited_on(actor_idx, step_idx)
            steps.append({
                "long_name": step.long_name,
                "name": step.name,
                "index": step_idx,
                "wait_on_actor_idx": waited_on[0] if waited_on else None,
                "wait_on_step_idx": waited_on[1] if waited_on else None,
            })
        actors.append({"name": actor.name, "index": actor_idx, "steps": steps})
    return {"name": event.name, "actors": actors}


def event_to_json(event: Event, full: bool = False, indent: int = 2) -> str:
    """
    Serialize an event to JSON.

    Args:
        event: Event to export
        full: Dump the whole model (flags, parameter data, edges) instead of the summary
        indent: JSON indentation
    """
    payload = event.to_dict() if full else event_summary(event)
    return json.dumps(payload, indent=indent)


def _dot_label(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def event_to_dot(event: Event) -> str:
    """
    Graphviz DOT source for an event.

    One cluster per actor with a node per step, an edge between consecutive
    steps of an actor, and one edge per wait-for relation drawn from the
    awaited step to the waiting step.
    """
    lines = ["digraph {", f'label="{_dot_label(event.name)}"']
    for actor_idx, actor in enumerate(event.actors):
        lines.append(f"subgraph cluster_{actor_idx} {{")
        lines.append(f'label="{actor_idx}. {_dot_label(actor.name)}"')
        for step_idx, step in enumerate(actor.steps):
            lines.append(
                f'action_{actor_idx}_{step_idx} [label="{step_idx}. {_dot_label(step.long_name)}"]'
            )
            if step_idx > 0:
                lines.append(f"action_{actor_idx}_{step_idx - 1} -> action_{actor_idx}_{step_idx}")
        lines.append("}")
    for wait in event.wait_fors:
        on_actor, on_step = wait.waiting_on.as_tuple()
        actor_idx, step_idx = wait.waiting.as_tuple()
        lines.append(f"action_{on_actor}_{on_step} -> action_{actor_idx}_{step_idx}")
    lines.append("}")
    return "\n".join(lines) + "\n"
