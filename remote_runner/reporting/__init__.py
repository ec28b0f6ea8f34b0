"""Reporting module - JSON batch reports."""

from .json_reporter import JsonReporter

__all__ = ["JsonReporter"]
