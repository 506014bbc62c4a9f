#!/usr/bin/env python3
"""
Touchless Media Gestures - replay entry point.

Usage:
    python main.py frames.jsonl
    python main.py frames.jsonl --profile youtube
"""

import os
import sys

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from media_gestures.cli import main

if __name__ == "__main__":
    sys.exit(main())
