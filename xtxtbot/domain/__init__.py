"""Domain layer — pure Python, no framework dependencies."""

from xtxtbot.domain.models import CommandInvocation
from xtxtbot.domain.commands import CommandDispatcher, build_help_text, tokenize
from xtxtbot.domain.liveness import ActivityClock, ConnectionLost, LivenessMonitor

__all__ = [
    "CommandInvocation",
    "CommandDispatcher",
    "build_help_text",
    "tokenize",
    "ActivityClock",
    "ConnectionLost",
    "LivenessMonitor",
]
