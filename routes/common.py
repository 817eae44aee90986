"""Common utilities and decorators for routes"""

import logging
import traceback
from datetime import datetime, timezone
from functools import wraps

from flask import request, jsonify

logger = logging.getLogger(__name__)


def log_request_data(func):
    """Decorator to log request data for API endpoints"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            # Log request details
            logger.info(f"API Call: {request.method} {request.path}")
            logger.info(f"Remote IP: {request.remote_addr}")
            logger.info(f"User Agent: {request.headers.get('User-Agent', 'Unknown')}")

            if request.args:
                # Sanitize sensitive data
                sanitized_args = {k: v for k, v in request.args.items() if k not in ['access_token', 'token']}
                logger.info(f"Query args: {sanitized_args}")

            # Call the actual function
            result = func(*args, **kwargs)

            # Log successful response
            if hasattr(result, 'status_code'):
                logger.info(f"Response status: {result.status_code}")

            return result

        except Exception as e:
            # Log the full exception with traceback
            logger.error(f"Error in {func.__name__}: {str(e)}")
            logger.error(f"Full traceback: {traceback.format_exc()}")

            # Return structured error response
            return jsonify({
                "error": str(e),
                "endpoint": request.path,
                "method": request.method,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }), 500

    return wrapper


def get_location_param():
    """Read the location query parameter, returning (location, error)"""
    location = request.args.get("location", "")
    if not location.strip():
        return None, "Location parameter is required"
    return location.strip(), None
