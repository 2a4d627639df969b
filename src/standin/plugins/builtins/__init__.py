"""Plugins shipped with standin."""
