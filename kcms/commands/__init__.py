"""CLI commands for KCMS."""

from .org import org_commands
from .period import period_commands
from .user import user_commands


def register_commands(app):
    """Register all CLI command groups with the Flask app."""
    app.cli.add_command(org_commands)
    app.cli.add_command(period_commands)
    app.cli.add_command(user_commands)
