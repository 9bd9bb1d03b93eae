"""HTTP blueprints of the application."""
