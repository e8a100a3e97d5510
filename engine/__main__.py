"""
Engine 진입점

실행 방법:
    python -m engine replay sessions/vendor.jsonl --catalog items.yaml
    python -m engine purge
"""

import asyncio
import sys

from engine.bootstrap import main

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
