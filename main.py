#!/usr/bin/env python3
"""Demo entry point for the quiz runner."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from quiz_runner.runner import main


if __name__ == "__main__":
    sys.exit(main())
