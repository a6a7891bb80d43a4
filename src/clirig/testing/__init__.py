#
# src/clirig/testing/__init__.py
#
"""
Test doubles for driving the harness without a real node.
"""
from .fakes import FakeAccessor, FakeNode

__all__ = [
    "FakeAccessor",
    "FakeNode",
]

# 🔼⚙️
