"""Facillit Admin - administrative console API for the Facillit platform."""

__version__ = "0.1.0"
