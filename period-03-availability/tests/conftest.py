"""
conftest.py — adds period-03-availability to sys.path so pytest can import its
modules directly without needing a package named period_03_availability.
"""
import sys
from pathlib import Path

_ROOT      = Path(__file__).resolve().parent.parent.parent   # project root
_COMPONENT = Path(__file__).resolve().parent.parent           # period-03-availability

for _p in [str(_ROOT), str(_COMPONENT)]:
    if _p not in sys.path:
        sys.path.insert(0, _p)
