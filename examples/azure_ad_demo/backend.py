from flask import Flask, g, jsonify

from examples.azure_ad_demo.app_config import auth


def create_app() -> Flask:
    """
    Create a Flask API whose routes require an Azure AD access token.

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)
    auth.init_app(app)

    @app.get("/api/whoami")
    @auth.require()
    def whoami():
        """Echo the caller identity taken from the validated token."""
        return jsonify(
            {
                "tenant": g.jwt.tenant_id,
                "application": g.jwt.application_id,
                "scopes": sorted(g.jwt.scopes),
            }
        ), 200

    @app.errorhandler(401)
    def unauthorized(error):
        return jsonify({"status": "denied", "message": error.description}), 401

    @app.errorhandler(503)
    def unavailable(error):
        return jsonify(
            {
                "status": "error",
                "message": "Unable to reach the identity provider. Please try again later.",
            }
        ), 503

    return app


if __name__ == "__main__":
    create_app().run(port=5001)
