"""Cluster membership, a message bus, group request routing and a key-value state machine for replicated clusters."""

__version__ = "0.1.0"