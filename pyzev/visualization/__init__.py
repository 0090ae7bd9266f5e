"""
Visualization module for pyzev.

Draws an event's steps and wait-for edges with matplotlib.
Install with: pip install pyzev[viz]
"""

import importlib.util

MATPLOTLIB_AVAILABLE = importlib.util.find_spec("matplotlib") is not None

__all__ = []

if MATPLOTLIB_AVAILABLE:
    from .event_graph import EventGraphVisualizer, save_event_graph
    __all__.extend(['EventGraphVisualizer', 'save_event_graph'])
else:
    def _raise_matplotlib_error(*args, **kwargs):
        raise ImportError(
            "Event graph rendering requires matplotlib. "
            "Install with: pip install pyzev[viz]"
        )

    class EventGraphVisualizer:
        def __init__(self, *args, **kwargs):
            _raise_matplotlib_error()

    def save_event_graph(*args, **kwargs):
        _raise_matplotlib_error()
