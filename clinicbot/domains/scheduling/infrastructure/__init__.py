"""Scheduling infrastructure: store repositories, gateway adapters, handoff registry and scheduler."""
