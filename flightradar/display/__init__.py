"""
Client-side radar display.

Keeps a marker set in step with periodic flight snapshots and tracks one
user-selected aircraft.
"""

from flightradar.display.markers import MarkerHandle, MarkerLayer, MarkerReconciler, ReconcileResult, RenderState
from flightradar.display.scheduler import PollScheduler
from flightradar.display.selection import InfoPanel, SelectionTracker

__all__ = [
    'InfoPanel',
    'MarkerHandle',
    'MarkerLayer',
    'MarkerReconciler',
    'PollScheduler',
    'ReconcileResult',
    'RenderState',
    'SelectionTracker',
]
