#!/usr/bin/env python3
"""
Convenience entry point for headless flock recording.

Usage:
    python record.py demo                 # Start new recording
    python record.py --resume demo        # Resume interrupted recording
    python record.py --status demo        # Check recording status
    python record.py --list               # List all recordings
"""

from tools.record import main

if __name__ == "__main__":
    main()
