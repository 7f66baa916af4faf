"""Pytest configuration shared by every test directory."""
import os
import sys

# Ensure project root and src/ on sys.path for absolute imports
ROOT = os.path.dirname(os.path.abspath(__file__))
for p in (ROOT, os.path.join(ROOT, "src")):
    if p not in sys.path:
        sys.path.insert(0, p)
