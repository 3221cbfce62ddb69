"""Tick-driven scripting core for tool-assisted speedruns: scheduler, tasks, hooks and script API."""

__version__ = "1.6.0"