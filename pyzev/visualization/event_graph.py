"""
2D rendering of an event's step graph using matplotlib.

Actors are drawn as columns, their steps top to bottom in order. Grey arrows
join consecutive steps of an actor; orange arrows go from an awaited step
to the step waiting on it.
"""

from io import BytesIO
from typing import Dict, Tuple

import matplotlib.pyplot as plt

from ..classes.event_objects import Event
from ..misc.logger import create_logger


class EventGraphVisualizer:
    """
    Static step-graph image of one event.

    Example:
        >>> from pyzev import load_zev, find_event
        >>> from pyzev.visualization import EventGraphVisualizer
        >>>
        >>> event = find_event(load_zev("F200_zev.dat"), "F200R02inpa")
        >>> EventGraphVisualizer(event).save_event_graph("bridge.png")
    """

    def __init__(self, event: Event, figsize: Tuple[int, int] = None, dpi: int = 100, verbose: bool = True):
        """
        Args:
            event: Event to draw
            figsize: Figure size in inches; derived from the event size when None
            dpi: Image resolution
            verbose: Whether to print progress messages
        """
        self.event = event
        self.dpi = dpi
        self.logger = create_logger(verbose=verbose, name="EventGraph")

        longest = max((len(a.steps) for a in event.actors), default=1)
        self.figsize = figsize or (max(4, 2.5 * len(event.actors)), max(3, 0.8 * longest + 1))

        self.colors = {
            'step': '#DCE6F2',
            'step_edge': '#1F4E79',
            'sequence': '#808080',
            'wait': '#FF6600',
        }

    def _positions(self) -> Dict[Tuple[int, int], Tuple[float, float]]:
        positions = {}
        for actor_idx, actor in enumerate(self.event.actors):
            for step_idx in range(len(actor.steps)):
                positions[(actor_idx, step_idx)] = (float(actor_idx), float(-step_idx))
        return positions

    def _draw(self, ax):
        positions = self._positions()

        for actor_idx, actor in enumerate(self.event.actors):
            ax.text(actor_idx, 0.8, f"{actor_idx}. {actor.name}", ha='center', va='bottom',
                    fontsize=9, fontweight='bold')
            for step_idx, step in enumerate(actor.steps):
                x, y = positions[(actor_idx, step_idx)]
                ax.text(x, y, f"{step_idx}. {step.long_name}", ha='center', va='center', fontsize=8,
                        bbox=dict(boxstyle='round', facecolor=self.colors['step'],
                                  edgecolor=self.colors['step_edge']))
                if step_idx > 0:
                    px, py = positions[(actor_idx, step_idx - 1)]
                    ax.annotate('', xy=(x, y + 0.25), xytext=(px, py - 0.25),
                                arrowprops=dict(arrowstyle='->', color=self.colors['sequence']))

        for wait in self.event.wait_fors:
            start = positions.get(wait.waiting_on.as_tuple())
            end = positions.get(wait.waiting.as_tuple())
            if start is None or end is None:
                self.logger.warning(f"Skipping dangling wait edge {wait.waiting_on.as_tuple()} -> "
                                    f"{wait.waiting.as_tuple()}")
                continue
            ax.annotate('', xy=end, xytext=start,
                        arrowprops=dict(arrowstyle='->', color=self.colors['wait'],
                                        connectionstyle='arc3,rad=0.2', alpha=0.8))

        longest = max((len(a.steps) for a in self.event.actors), default=1)
        ax.set_xlim(-0.75, max(len(self.event.actors), 1) - 0.25)
        ax.set_ylim(-longest, 1.5)
        ax.set_title(self.event.name, fontsize=12, fontweight='bold')
        ax.axis('off')

    def save_event_graph(self, filename: str) -> str:
        """Render the graph to an image file and return its path."""
        self.logger.info(f"Drawing event '{self.event.name}' ({len(self.event.actors)} actors, "
                         f"{len(self.event.wait_fors)} wait edges)")
        fig, ax = plt.subplots(figsize=self.figsize, dpi=self.dpi)
        self._draw(ax)
        plt.tight_layout()
        fig.savefig(filename, dpi=self.dpi, bbox_inches='tight')
        plt.close(fig)
        self.logger.info(f"✓ Saved event graph: {filename}")
        return filename

    def get_event_graph_bytes(self, format: str = 'PNG') -> bytes:
        """Render the graph and return the encoded image ('PNG', 'SVG', 'PDF')."""
        fig, ax = plt.subplots(figsize=self.figsize, dpi=self.dpi)
        self._draw(ax)
        plt.tight_layout()

        buffer = BytesIO()
        fig.savefig(buffer, format=format.lower(), dpi=self.dpi, bbox_inches='tight')
        plt.close(fig)
        image_bytes = buffer.getvalue()
        buffer.close()
        return image_bytes


def save_event_graph(event: Event, filename: str, **kwargs) -> str:
    """Convenience wrapper around EventGraphVisualizer.save_event_graph."""
    return EventGraphVisualizer(event, **kwargs).save_event_graph(filename)
