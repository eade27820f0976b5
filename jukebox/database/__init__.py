"""Persistence models and database bootstrap."""
