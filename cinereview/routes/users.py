from flask import Blueprint, jsonify, request

from cinereview.auth import current_user, require_auth
from cinereview.schemas import PageQuery, ProfileUpdate
from cinereview.services import reviews, users

bp = Blueprint("users", __name__)


@bp.route("/profile", methods=["GET"])
@require_auth
def get_profile():
    return jsonify(users.get_profile(current_user()))


@bp.route("/profile", methods=["PUT"])
@require_auth
def update_profile():
    """
    PUT /api/users/profile
    Writable fields: username, bio, profilePicture, favoriteGenres.
    """
    payload = ProfileUpdate.model_validate(request.get_json(silent=True) or {})
    user = users.update_profile(current_user(), payload)
    return jsonify({
        "status": "success",
        "message": "Profile updated successfully",
        "user": user.to_dict(),
    })


@bp.route("/watchlist", methods=["GET"])
@require_auth
def get_watchlist():
    return jsonify({"watchlist": users.list_watchlist(current_user())})


@bp.route("/watchlist/<int:movie_id>", methods=["POST"])
@require_auth
def add_to_watchlist(movie_id):
    watchlist = users.add_to_watchlist(current_user(), movie_id)
    return jsonify({
        "status": "success",
        "message": "Movie added to watchlist",
        "watchlist": watchlist,
    })


@bp.route("/watchlist/<int:movie_id>", methods=["DELETE"])
@require_auth
def remove_from_watchlist(movie_id):
    watchlist = users.remove_from_watchlist(current_user(), movie_id)
    return jsonify({
        "status": "success",
        "message": "Movie removed from watchlist",
        "watchlist": watchlist,
    })


@bp.route("/reviews", methods=["GET"])
@require_auth
def my_reviews():
    """GET /api/users/reviews?page=1&limit=10, with the reviewed movie embedded."""
    params = PageQuery.model_validate(request.args.to_dict())
    page = reviews.list_user_reviews(current_user().id, params)
    return jsonify({
        "reviews": [review.to_dict(include_movie=True) for review in page.items],
        "pagination": page.metadata("totalReviews"),
    })
