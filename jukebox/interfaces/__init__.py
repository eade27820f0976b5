"""Adapters exposing the domain to the outside world."""
