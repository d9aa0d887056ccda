"""Keyboard input: the debouncer and the terminal key source."""
