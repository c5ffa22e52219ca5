import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def load_tests(loader, tests, pattern):
    return loader.discover(str(ROOT / "tests"), pattern="test_*.py", top_level_dir=str(ROOT))


if __name__ == "__main__":
    unittest.main(verbosity=2)
