#!/usr/bin/env python
"""
Do Not Go Gentle - Main Entry Point
===================================
Run the gesture-driven particle sketch.
"""

from pathlib import Path

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent / ".env")

from gentle_night.ui import main

if __name__ == "__main__":
    main()
