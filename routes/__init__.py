from .deals import deals_bp
from .templates import templates_bp

def register_blueprints(app):
    app.register_blueprint(deals_bp)
    app.register_blueprint(templates_bp)
