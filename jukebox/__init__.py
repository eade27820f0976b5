"""Jukebox: stateless navigation and response engine for a voice music skill."""
