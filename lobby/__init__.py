"""Room host package: wraps the room state machine with networking."""

from .server import RoomServer

__all__ = ["RoomServer"]
