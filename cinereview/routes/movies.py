from flask import Blueprint, jsonify, request

from cinereview.auth import current_user, optional_auth, require_admin
from cinereview.schemas import MovieCreate, MovieListQuery, MovieUpdate
from cinereview.services import catalog

bp = Blueprint("movies", __name__)


@bp.route("", methods=["GET"])
def list_movies():
    """
    GET /api/movies?page=1&limit=12&search=&genre=&year=&minRating=&sortBy=newest
    Active movies only, with pagination metadata.
    """
    params = MovieListQuery.model_validate(request.args.to_dict())
    page = catalog.list_movies(params)
    return jsonify({
        "movies": [movie.to_dict() for movie in page.items],
        "pagination": page.metadata("totalMovies"),
    })


@bp.route("/featured/trending", methods=["GET"])
def featured():
    return jsonify(catalog.featured_movies())


@bp.route("/<int:movie_id>", methods=["GET"])
@optional_auth
def movie_detail(movie_id):
    return jsonify(catalog.get_movie_detail(movie_id, current_user()))


@bp.route("", methods=["POST"])
@require_admin
def create_movie():
    payload = MovieCreate.model_validate(request.get_json(silent=True) or {})
    movie = catalog.create_movie(payload)
    return jsonify({
        "status": "success",
        "message": "Movie added successfully",
        "movie": movie.to_dict(),
    }), 201


@bp.route("/<int:movie_id>", methods=["PUT"])
@require_admin
def update_movie(movie_id):
    payload = MovieUpdate.model_validate(request.get_json(silent=True) or {})
    movie = catalog.update_movie(movie_id, payload)
    return jsonify({
        "status": "success",
        "message": "Movie updated successfully",
        "movie": movie.to_dict(),
    })


@bp.route("/<int:movie_id>", methods=["DELETE"])
@require_admin
def delete_movie(movie_id):
    catalog.remove_movie(movie_id)
    return jsonify({"status": "success", "message": "Movie deleted successfully"})
