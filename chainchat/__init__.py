"""Peer-to-peer chat node with a proof-of-work message archive, peer list and command loop."""

__version__ = "0.1.0"
__all__ = ["__version__"]