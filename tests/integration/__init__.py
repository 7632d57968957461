"""Integration tests.

These exercise full save/restore cycles against real storage drivers
(the filesystem, via ``tmp_path``). Run only the fast unit tests with
``pytest tests/unit/``.
"""
from __future__ import annotations
