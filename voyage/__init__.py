"""Voyage Central travel-agency back-office API."""
