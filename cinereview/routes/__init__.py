"""HTTP blueprints, mounted under /api by the application factory."""

from cinereview.routes.auth import bp as auth_bp
from cinereview.routes.movies import bp as movies_bp
from cinereview.routes.reviews import bp as reviews_bp
from cinereview.routes.users import bp as users_bp

BLUEPRINTS = (
    (auth_bp, "/api/auth"),
    (movies_bp, "/api/movies"),
    (reviews_bp, "/api/reviews"),
    (users_bp, "/api/users"),
)
