import os
import logging
import traceback

from flask import Flask, jsonify, request
from flask_cors import CORS

from config import FLASK_CONFIG
from routes import ALL_BLUEPRINTS

app = Flask(__name__)
app.config["SECRET_KEY"] = FLASK_CONFIG["secret_key"]
CORS(app)

# Configure logging
os.makedirs('logs', exist_ok=True)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('logs/app.log'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

for blueprint in ALL_BLUEPRINTS:
    app.register_blueprint(blueprint)


@app.errorhandler(404)
def not_found(error):
    logger.warning(f"404 error: {request.path} not found")
    return jsonify({"error": "Endpoint not found", "path": request.path}), 404


@app.errorhandler(405)
def method_not_allowed(error):
    logger.warning(f"405 error: {request.method} not allowed for {request.path}")
    return jsonify({"error": "Method not allowed", "method": request.method, "path": request.path}), 405


@app.errorhandler(500)
def internal_error(error):
    logger.error(f"500 error: {str(error)}")
    logger.error(f"Full traceback: {traceback.format_exc()}")
    return jsonify({"error": "Internal server error", "message": str(error)}), 500


if __name__ == "__main__":
    logger.info("Starting TutorConnect geocoding service")
    app.run(
        debug=FLASK_CONFIG["debug"],
        host="0.0.0.0",
        port=FLASK_CONFIG["port"],
    )
