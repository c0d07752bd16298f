"""Cloth simulation building blocks: particle and constraint setup, spatial hashing, actors and timing."""

__version__ = "0.1.0"