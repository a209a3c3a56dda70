from flask import Flask, jsonify

from config import configure_logging
from dealdocs.paperwork import DocumentError
from routes import register_blueprints


def create_app(config_object='config.Config'):
    app = Flask(__name__)
    app.config.from_object(config_object)

    configure_logging()

    # Register blueprints
    register_blueprints(app)

    @app.errorhandler(DocumentError)
    def handle_document_error(error):
        app.logger.error(f"Unhandled document error: {error}")
        return jsonify({'success': False, 'error': str(error)}), 500

    return app


if __name__ == '__main__':
    create_app().run(debug=True)
