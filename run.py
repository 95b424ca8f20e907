"""Command line entry point: ``python run.py erp sync itemMaster``.

Equivalent to ``flask --app run erp ...``; the scheduler calls this directly.
"""

import os

from flask.cli import FlaskGroup

from opsdesk import create_app

# Get environment configuration
ENV = os.getenv('FLASK_ENV', 'development')

# Create the application using our factory function
app = create_app(ENV)

cli = FlaskGroup(create_app=lambda: app, add_default_commands=False, load_dotenv=False)

if __name__ == '__main__':
    cli()
