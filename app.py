import logging
import sys

from flask import Flask, jsonify

from netdesign.config import get_config
from netdesign.routes import limiter, network_bp

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler('network_design.log', encoding='utf-8')
    ]
)
logger = logging.getLogger(__name__)


def create_app(overrides=None):
    """Build the Flask app; ``overrides`` is applied on top of the environment config."""
    app = Flask(__name__, template_folder='templates')
    app.config.update(get_config())
    if overrides:
        app.config.update(overrides)

    if not app.config.get('OPENAI_API_KEY'):
        logger.warning("OPENAI_API_KEY not set - chat will return a configuration error")

    limiter.init_app(app)
    app.register_blueprint(network_bp)

    @app.errorhandler(404)
    def not_found_error(e):
        """Handle 404 errors."""
        return jsonify({'error': 'Resource not found'}), 404

    @app.errorhandler(429)
    def rate_limited(e):
        return jsonify({'error': 'Too many requests', 'message': str(e.description)}), 429

    @app.errorhandler(Exception)
    def handle_exception(e):
        """Handle all unhandled exceptions."""
        logger.error(f"Unhandled exception: {str(e)}")
        return jsonify({
            'error': 'An unexpected error occurred',
            'message': str(e)
        }), 500

    return app


app = create_app()

if __name__ == '__main__':
    app.run(host=app.config['HOST'], port=app.config['PORT'], debug=app.config['DEBUG'])
