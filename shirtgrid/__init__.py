from flask import Flask
from .config import Config
from .extensions import cors


def create_app(config_class: type[Config] = Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Extensions
    cors.init_app(app)

    # Blueprints
    from .routes.mockups import bp as mockups_pages
    from .routes.mockups_api import bp as mockups_api
    from .routes.editor_api import bp as editor_api
    from .routes.projects_api import bp as projects_api

    app.register_blueprint(mockups_pages)
    app.register_blueprint(mockups_api, url_prefix="/api")
    app.register_blueprint(editor_api, url_prefix="/api")
    app.register_blueprint(projects_api, url_prefix="/api")

    return app
