"""Authentication utilities for password hashing and user management."""
from functools import wraps
from werkzeug.security import generate_password_hash, check_password_hash
from flask import session, jsonify, has_request_context
from orderqueue.models import User, db
from orderqueue.logging_config import get_logger

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using werkzeug's security utilities."""
    return generate_password_hash(password, method='pbkdf2:sha256')


def verify_password(password_hash: str, password: str) -> bool:
    """Verify a password against a hash."""
    return check_password_hash(password_hash, password)


def get_current_user():
    """
    Get the current logged-in user from the session.

    Returns:
        User object if logged in, None otherwise
    """
    # Outside a request (CLI scripts) there is no user
    if not has_request_context():
        return None

    user_id = session.get('user_id')
    if not user_id:
        return None

    user = db.session.get(User, user_id)
    if user and user.is_active:
        return user
    return None


def get_current_user_id():
    """
    Get the current logged-in user's id.

    Returns:
        int: User id if logged in, None otherwise
    """
    user = get_current_user()
    return getattr(user, 'id', None) if user else None


def login_required(f):
    """
    Decorator to require user login for a route.

    Returns 401 Unauthorized if user is not logged in.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = get_current_user()
        if not user:
            return jsonify({'error': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """
    Decorator to require admin privileges for a route.

    Returns 401 Unauthorized if user is not logged in.
    Returns 403 Forbidden if user is not an admin.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = get_current_user()
        if not user:
            return jsonify({'error': 'Authentication required'}), 401
        if not user.is_admin:
            logger.warning(f"Non-admin user {user.username} attempted to access admin-only route")
            return jsonify({'error': 'Admin privileges required'}), 403
        return f(*args, **kwargs)
    return decorated_function
