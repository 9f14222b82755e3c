"""Local console front-end for Flip 7."""

from cli.console import ConsoleDecisions

__all__ = ["ConsoleDecisions"]
