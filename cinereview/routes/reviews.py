from flask import Blueprint, jsonify, request

from cinereview.auth import current_user, require_auth
from cinereview.schemas import PageQuery, ReviewCreate, ReviewUpdate
from cinereview.services import reviews

bp = Blueprint("reviews", __name__)


@bp.route("/movie/<int:movie_id>", methods=["GET"])
def movie_reviews(movie_id):
    """GET /api/reviews/movie/<movie_id>?page=1&limit=10, newest first."""
    params = PageQuery.model_validate(request.args.to_dict())
    page = reviews.list_movie_reviews(movie_id, params)
    return jsonify({
        "reviews": [review.to_dict() for review in page.items],
        "pagination": page.metadata("totalReviews"),
    })


@bp.route("/movie/<int:movie_id>", methods=["POST"])
@require_auth
def add_review(movie_id):
    """
    POST /api/reviews/movie/<movie_id>
    Body: {"rating": 1-5, "reviewText": "10 to 1000 characters"}
    """
    payload = ReviewCreate.model_validate(request.get_json(silent=True) or {})
    review = reviews.create_review(current_user(), movie_id, payload)
    return jsonify({
        "status": "success",
        "message": "Review added successfully",
        "review": review.to_dict(),
    }), 201


@bp.route("/<int:review_id>", methods=["PUT"])
@require_auth
def update_review(review_id):
    payload = ReviewUpdate.model_validate(request.get_json(silent=True) or {})
    review = reviews.update_review(current_user(), review_id, payload)
    return jsonify({
        "status": "success",
        "message": "Review updated successfully",
        "review": review.to_dict(),
    })


@bp.route("/<int:review_id>", methods=["DELETE"])
@require_auth
def delete_review(review_id):
    reviews.delete_review(current_user(), review_id)
    return jsonify({"status": "success", "message": "Review deleted successfully"})
