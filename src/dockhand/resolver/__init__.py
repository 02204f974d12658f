"""Input resolution: sources, validators and the interactive channel."""

from dockhand.resolver.channel import InteractiveChannel, open_interactive_channel
from dockhand.resolver.resolver import InputResolver

__all__ = [
    "InputResolver",
    "InteractiveChannel",
    "open_interactive_channel",
]
