"""CLI package for relcrm.

The main Typer app is created in app.py and commands are registered from
each module.
"""

# Import command modules to register commands with the app
import relcrm.cli.commands_auth  # noqa: F401, E402
import relcrm.cli.commands_companies  # noqa: F401, E402
import relcrm.cli.commands_contacts  # noqa: F401, E402
import relcrm.cli.commands_dashboard  # noqa: F401, E402
import relcrm.cli.commands_sync  # noqa: F401, E402
import relcrm.cli.commands_tasks  # noqa: F401, E402
from relcrm.cli.app import app

__all__ = ["app"]
