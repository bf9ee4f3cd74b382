"""Void-and-cluster ranking: tracker, engine and phase controller."""

from .engine import VoidClusterEngine
from .phases import SENTINEL, Phase, PhaseController
from .tracker import RankTracker, TrackSet

__all__ = [
    "RankTracker",
    "TrackSet",
    "VoidClusterEngine",
    "Phase",
    "PhaseController",
    "SENTINEL",
]
