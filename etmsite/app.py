"""
Application factory.

Run with:
    flask --app etmsite.app run

Setup:
    flask --app etmsite.app init-db
    flask --app etmsite.app create-admin --login admin
"""

from flask import Flask

from .core.config import Config
from .extension import EtmSite


def create_app(config=None):
    """Create the API application. *config* overrides values from the environment."""
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    EtmSite(app)
    return app
