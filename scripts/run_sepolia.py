#!/usr/bin/env python3
"""
Sepolia launcher script.

Runs one swap-and-deposit pass with the configs/sepolia.yaml configuration.
The signing key is read from the PRIVATE_KEY environment variable or .env file.

Usage: python scripts/run_sepolia.py [amount]
"""

import asyncio
import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from chainflow.runner.pipeline import main


if __name__ == "__main__":
    amount = sys.argv[1] if len(sys.argv) > 1 else "1"
    config = str(project_root / "configs" / "sepolia.yaml")

    try:
        sys.exit(asyncio.run(main([amount, "--config", config])))
    except KeyboardInterrupt:
        print("\nRun interrupted by user.")
        sys.exit(130)
