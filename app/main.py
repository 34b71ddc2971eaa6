import argparse
import atexit
import logging
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

# Import configuration management
import sys
sys.path.append(str(Path(__file__).parent.parent))
from config_manager import ConfigManager

from personalization_service import ContentCatalog, JsonFileCatalog
from personalization_service.logging_config import setup_logging
from app.personalization.factory import create_personalization_module
from app.event_tracking.factory import create_event_tracking_module

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).parent.parent


def _resolve(path: str) -> Path:
    p = Path(path)
    return p if p.is_absolute() else BASE_DIR / p


def create_app(
    config_manager: Optional[ConfigManager] = None,
    user_data_dir: Optional[Path] = None,
    catalog: Optional[ContentCatalog] = None,
) -> Flask:
    """Build the Flask application.

    Args:
        config_manager: Configuration source (defaults to ``web_app_config.json``)
        user_data_dir: Override for the per-visitor data directory
        catalog: Override for the content catalog

    Returns:
        Configured Flask app; the personalization registry is available as
        ``app.extensions["personalization"]``
    """
    config_manager = config_manager or ConfigManager()
    paths_config = config_manager.get_paths_config()
    personalization_config = config_manager.get_personalization_config()

    user_data_dir = Path(user_data_dir) if user_data_dir else _resolve(paths_config.user_data_dir)
    catalog = catalog or JsonFileCatalog(_resolve(paths_config.catalog_file))

    app = Flask(__name__)
    app.wsgi_app = ProxyFix(
        app.wsgi_app,
        x_proto=1,      # trust 1 hop for X-Forwarded-Proto
        x_host=1,       # trust 1 hop for X-Forwarded-Host
        x_prefix=1)     # <-- pay attention to X-Forwarded-Prefix

    # -------------------------------------------------------------------------
    # Subsystems
    # -------------------------------------------------------------------------

    personalization_module = create_personalization_module(
        user_data_dir=user_data_dir,
        catalog=catalog,
        config=personalization_config
    )
    manager = personalization_module["service"]
    app.register_blueprint(personalization_module["blueprint"])

    event_tracking_module = create_event_tracking_module(manager)
    app.register_blueprint(event_tracking_module["blueprint"])

    app.extensions["personalization"] = manager

    @app.get("/actuator/health")
    def actuator_health():
        """Health check endpoint for monitoring tools and cloud platforms."""
        return jsonify({
            "status": "UP",
            "service": "reading-personalization"
        }), 200

    logger.info(f"Personalization data stored in {user_data_dir}")
    return app


# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Reading personalization service")
    parser.add_argument("--port", type=int, help="Port to run the server on")
    parser.add_argument("--host", type=str, help="Host to bind the server to")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    args = parser.parse_args()

    config_manager = ConfigManager()
    app_config = config_manager.get_app_config()
    paths_config = config_manager.get_paths_config()

    # Override configuration with command line arguments
    if args.port:
        app_config.port = args.port
    if args.host:
        app_config.host = args.host
    if args.debug:
        app_config.debug = args.debug

    setup_logging(debug=app_config.debug, log_file=paths_config.log_file)
    app = create_app(config_manager)
    atexit.register(app.extensions["personalization"].close_all)

    print(f"📋 Configuration loaded:")
    print(f"   - Catalog: {paths_config.catalog_file}")
    print(f"   - User data: {paths_config.user_data_dir}")
    print(f"   - Server: {app_config.host}:{app_config.port}")
    app.run(
        host=app_config.host,
        port=app_config.port,
        debug=app_config.debug
    )
