"""script2chat: turn play scripts into chat conversations."""

__version__ = "0.1.0"
