import os
from dotenv import load_dotenv

load_dotenv()


def _get_float(name, default=None):
    value = os.getenv(name)
    if value in (None, ''):
        return default
    return float(value)


class Config:
    # Flask
    FLASK_ENV = os.getenv('FLASK_ENV', 'development')
    DEBUG = os.getenv('FLASK_ENV') == 'development'

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Flow definition used when a run request does not carry one
    FLOW_DEFINITION_PATH = os.getenv('FLOW_DEFINITION_PATH', 'flows/flow.json')

    # Engine limits
    FLOW_MAX_DEPTH = int(os.getenv('FLOW_MAX_DEPTH', '200'))
    FLOW_RUN_TIMEOUT_SECONDS = _get_float('FLOW_RUN_TIMEOUT_SECONDS')

    # External calls (httpRequest nodes)
    HTTP_TIMEOUT_SECONDS = _get_float('HTTP_TIMEOUT_SECONDS', 30.0)


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    FLOW_RUN_TIMEOUT_SECONDS = None
