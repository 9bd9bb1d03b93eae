"""Helpers shared by the blueprints."""
