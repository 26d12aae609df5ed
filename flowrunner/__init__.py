import logging

from flask import Flask

from flowrunner.config import Config


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO),
        format=app.config.get('LOG_FORMAT')
    )

    # One service per app, configured from app.config
    from flowrunner.services.flow_execution_service import FlowExecutionService
    app.extensions['flow_execution_service'] = FlowExecutionService(config=app.config)

    from flowrunner.routes import flows
    app.register_blueprint(flows.flows_bp)

    # Health check endpoint
    from flowrunner.routes import health
    app.register_blueprint(health.bp)

    return app
