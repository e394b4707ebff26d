"""Tk preview for the wall (GUI mode)."""
