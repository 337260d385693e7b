"""Mapty: log runs and rides by clicking on a map."""

__version__ = "0.1.0"
