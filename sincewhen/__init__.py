"""sincewhen: multi-user elapsed-time trackers addressed by short slugs."""

__version__ = "0.1.0"
