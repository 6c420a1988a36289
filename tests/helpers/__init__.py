"""Test helper utilities for organization contact finder tests."""

from .fake_collector import GatedCollector, ScriptedCollector, SlowCollector, make_raw_candidate

__all__ = ["GatedCollector", "ScriptedCollector", "SlowCollector", "make_raw_candidate"]
