"""Prompt fragments for the analysis stage."""
