"""
Access-control gate for CineReview.

Bearer tokens are signed and timestamped with itsdangerous; passwords are
hashed with werkzeug.security. Three access tiers are exposed as decorators:

- optional_auth: anonymous allowed; a usable token sets g.current_user
- require_auth: a valid token for an active user is required (401 otherwise)
- require_admin: additionally requires the admin role (403 otherwise)

Owner-or-admin checks on specific resources run inside the service layer via
ensure_owner_or_admin, after the resource has been loaded.
"""

from functools import wraps
from typing import Optional

from flask import current_app, g, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from cinereview.errors import AuthenticationError, PermissionDeniedError
from cinereview.logging_config import get_logger
from cinereview.logging_context import set_user_id
from cinereview.metrics import track_auth_failure
from cinereview.models import db, User

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(
        current_app.config['SECRET_KEY'],
        salt=current_app.config.get('TOKEN_SALT', 'cinereview-auth'),
    )


def issue_token(user: User) -> str:
    """Sign a bearer token identifying `user`."""
    return _serializer().dumps({'user_id': user.id})


def _reject(message: str, reason: str):
    track_auth_failure(reason)
    logger.info("authentication_rejected", reason=reason, path=request.path)
    raise AuthenticationError(message, reason)


def extract_bearer_token() -> Optional[str]:
    """Return the token from `Authorization: Bearer <token>`, or None."""
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def load_user_from_token(token: Optional[str]) -> User:
    """
    Resolve a bearer token to an active user.

    Raises:
        AuthenticationError: reason is "missing", "invalid", "expired" or
            "user_not_found"
    """
    if not token:
        _reject('Access denied. No token provided.', 'missing')

    max_age = current_app.config.get('TOKEN_MAX_AGE_SECONDS')
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        _reject('Token expired.', 'expired')
    except BadSignature:
        _reject('Invalid token.', 'invalid')

    user_id = payload.get('user_id') if isinstance(payload, dict) else None
    if not isinstance(user_id, int):
        _reject('Invalid token.', 'invalid')

    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        _reject('Invalid token. User not found.', 'user_not_found')

    return user


def _bind_user(user: Optional[User]):
    g.current_user = user
    if user is not None:
        set_user_id(user.id)


def current_user() -> Optional[User]:
    """The authenticated user for this request, None when anonymous."""
    return g.get('current_user')


def require_auth(view):
    """Reject the request with 401 before the view runs unless the token is valid."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        _bind_user(load_user_from_token(extract_bearer_token()))
        return view(*args, **kwargs)
    return wrapper


def optional_auth(view):
    """Attach the user when a usable token is present; otherwise continue anonymously."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = None
        token = extract_bearer_token()
        if token:
            try:
                user = load_user_from_token(token)
            except AuthenticationError as e:
                logger.debug("optional_auth_degraded", reason=e.reason)
        _bind_user(user)
        return view(*args, **kwargs)
    return wrapper


def require_admin(view):
    """Require a valid token (401) and the admin role (403)."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = load_user_from_token(extract_bearer_token())
        _bind_user(user)
        if not user.is_admin:
            logger.info("authorization_rejected", user_id=user.id, required="admin")
            raise PermissionDeniedError('Admin access required.')
        return view(*args, **kwargs)
    return wrapper


def ensure_owner_or_admin(user: User, owner_id: int, message: str):
    """
    Authorize access to a resource owned by `owner_id`.

    Raises:
        PermissionDeniedError: if `user` is neither the owner nor an admin
    """
    if user.is_admin or user.id == owner_id:
        return
    logger.info("authorization_rejected", user_id=user.id, owner_id=owner_id)
    raise PermissionDeniedError(message)
