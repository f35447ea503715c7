"""Run reports written for manual review."""

from .guess_report import GuessEntry, GuessLogger

__all__ = ["GuessEntry", "GuessLogger"]
