"""Dispatch sink abstractions for synthesized pointer events."""

from crowdptr.input.backend import DispatchSink, LogDispatchSink

__all__ = ["DispatchSink", "LogDispatchSink"]
