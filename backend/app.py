from flask import Flask, request
from flask_cors import CORS
from werkzeug.exceptions import MethodNotAllowed
from config import Config
from routes.location_routes import location_bp, submit_method_not_allowed
from routes.legacy_routes import legacy_bp, save_method_not_allowed
from services.observability import setup_observability

# Routing rejects wrong verbs before any view runs, so each endpoint's
# documented 405 body is produced here
METHOD_NOT_ALLOWED_RESPONSES = {
    '/api/submit-location': submit_method_not_allowed,
    '/api/save-location': save_method_not_allowed,
}


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    CORS(app, origins=app.config.get('CORS_ORIGINS', '*'))  # Browser clients may be hosted elsewhere

    # ── Observability ──
    setup_observability(app)

    app.register_blueprint(location_bp)
    app.register_blueprint(legacy_bp)

    @app.errorhandler(MethodNotAllowed)
    def method_not_allowed(e):
        respond = METHOD_NOT_ALLOWED_RESPONSES.get(request.path)
        if respond is None:
            return e
        return respond()

    @app.route('/')
    def index():
        return {"message": "Find My State API is running", "version": "1.0"}

    return app

if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=5000)
