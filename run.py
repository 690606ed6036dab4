#!/usr/bin/env python3
"""
run.py - Main entry point for the Quatter core

Usage:
    python run.py play
    python run.py test_all
    python run.py --debug benchmark --iterations 5000
"""

import os
import sys

# Add the project root to Python path to ensure imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from quatter.interfaces.cli import main

if __name__ == "__main__":
    sys.exit(main())
