"""Marker base for domain ports."""

from typing import Protocol


class Port(Protocol):
    """Base for interfaces the domain consumes and infrastructure implements.

    Ports are Protocols so tests can substitute any structurally matching fake.
    """
