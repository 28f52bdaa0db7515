"""Concurrency — sequential or parallel batch execution."""

from picset.concurrency.pool import run_all

__all__ = ["run_all"]
