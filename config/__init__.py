"""Simulation configuration modules."""
