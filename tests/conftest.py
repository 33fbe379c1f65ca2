"""Test configuration that makes project packages importable and runs async tests."""

import sys
from pathlib import Path

pytest_plugins = ("pytest_asyncio",)

# Add project root to sys.path so `ipp_proto`, `ipp_client` and `ipp_shared` can be imported in tests.
ROOT = Path(__file__).resolve().parent.parent
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)
