"""Offline recording and playback tools."""
