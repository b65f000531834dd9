#!/usr/bin/env python3
"""
Convenience entry point for flock recording playback.

Usage:
    python playback.py <session_name>              # Playback recording
    python playback.py <session_name> --speed 2    # Faster playback
    python playback.py <session_name> --loop       # Loop playback
"""

from tools.playback import main

if __name__ == "__main__":
    main()
