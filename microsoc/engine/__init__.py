"""Engine: window tracker, escalator, broadcaster, pipeline and command center."""

from .broadcast import Broadcaster, Subscription
from .command_center import CommandCenter
from .escalator import IncidentEscalator
from .pipeline import EventPipeline
from .window import TrafficWindowTracker

__all__ = [
    "Broadcaster",
    "CommandCenter",
    "EventPipeline",
    "IncidentEscalator",
    "Subscription",
    "TrafficWindowTracker",
]
