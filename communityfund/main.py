import os
import logging
from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from communityfund.models.database import db
# Imported so every table is registered before create_all
from communityfund.models import acknowledgement, campaign, donation, user  # noqa: F401
from communityfund.routes.acknowledgements import acknowledgements_bp
from communityfund.routes.admin import admin_bp
from communityfund.routes.campaigns import campaigns_bp
from communityfund.routes.oauth import oauth_bp, init_oauth
from communityfund.routes.users import users_bp, uploads_bp

# Initialize extensions
jwt = JWTManager()


def _split(value):
    return [item.strip() for item in value.split(',') if item.strip()] if value else []


def create_app(test_config=None):
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'communityfund-secret-key')
    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'communityfund-jwt-secret')
    app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv('DATABASE_URL', 'sqlite:///communityfund.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['PLATFORM_FEE_PERCENT'] = float(os.getenv('PLATFORM_FEE_PERCENT', 10))
    app.config['ADMIN_EMAILS'] = _split(os.getenv('ADMIN_EMAILS'))

    # OAuth Configuration
    app.config['GOOGLE_CLIENT_ID'] = os.getenv('GOOGLE_CLIENT_ID')
    app.config['GOOGLE_CLIENT_SECRET'] = os.getenv('GOOGLE_CLIENT_SECRET')
    app.config['GOOGLE_REDIRECT_URI'] = os.getenv('GOOGLE_REDIRECT_URI')
    app.config['FRONTEND_URL'] = os.getenv('FRONTEND_URL')

    # Asset store for campaign images, documents and ID scans
    app.config['ASSET_STORE_URL'] = os.getenv('ASSET_STORE_URL')
    app.config['ASSET_STORE_API_KEY'] = os.getenv('ASSET_STORE_API_KEY')
    app.config['ASSET_STORE_TIMEOUT'] = float(os.getenv('ASSET_STORE_TIMEOUT', 30))

    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    # Initialize extensions
    db.init_app(app)
    jwt.init_app(app)
    CORS(app)
    init_oauth(app)

    # Register routes
    app.register_blueprint(campaigns_bp, url_prefix='/api/campaigns')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(acknowledgements_bp, url_prefix='/api/acknowledgements')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(uploads_bp, url_prefix='/api/uploads')
    app.register_blueprint(oauth_bp, url_prefix='/api/oauth')

    # Create database tables
    with app.app_context():
        db.create_all()

    @app.route('/')
    def home():
        return jsonify({
            "message": "Community Fund API is running!",
            "status": "success",
            "version": "1.0.0"
        })

    @app.route('/api/health')
    def health():
        return jsonify({"status": "healthy", "service": "Community Fund API"})

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 5000)), debug=False)
