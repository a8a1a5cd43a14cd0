"""
Tests for the offline demo store.

The demo store must follow the same rules as the API: one review per user
per movie, derived ratings, set-like watchlists and the catalog query
semantics of GET /movies.
"""

import json

import pytest

from cinereview.client.demo_store import DemoStore, seed_state
from cinereview.client.errors import (
    AuthError,
    ClientValidationError,
    ConflictError,
    NotFoundError,
    StorageError,
)
from cinereview.client.sample_data import SAMPLE_MOVIES

REVIEW_TEXT = "An unforgettable piece of cinema."


@pytest.fixture
def store():
    return DemoStore()


class TestSeedState:

    def test_catalog_starts_without_ratings(self):
        state = seed_state()
        assert len(state["movies"]) == len(SAMPLE_MOVIES)
        assert all(m["averageRating"] == 0 and m["totalReviews"] == 0 for m in state["movies"])
        assert state["reviews"] == []
        assert state["watchlist"] == []

    def test_seed_is_independent_copy(self):
        first = seed_state()
        first["profile"]["username"] = "Changed"
        first["movies"][0]["genre"].append("Changed")
        second = seed_state()
        assert second["profile"]["username"] == "Demo User"
        assert "Changed" not in second["movies"][0]["genre"]


class TestDemoCatalog:

    def test_default_listing(self, store):
        result = store.list_movies()
        assert len(result["movies"]) == 10
        assert result["pagination"]["totalMovies"] == 10
        assert result["pagination"]["hasNext"] is False
        # Newest first: the last seeded sample was added most recently
        assert result["movies"][0]["_id"] == "10"

    def test_pagination(self, store):
        result = store.list_movies(page=2, limit=4)
        assert [m["_id"] for m in result["movies"]] == ["6", "5", "4", "3"]
        assert result["pagination"] == {
            "currentPage": 2,
            "totalPages": 3,
            "totalMovies": 10,
            "limit": 4,
            "hasNext": True,
            "hasPrev": True,
        }

    def test_search_matches_title_synopsis_and_director(self, store):
        assert [m["title"] for m in store.list_movies(search="matrix")["movies"]] == ["The Matrix"]
        nolan = store.list_movies(search="NOLAN")["movies"]
        assert {m["title"] for m in nolan} == {"The Dark Knight", "Inception"}

    def test_genre_and_year_filters(self, store):
        sci_fi = store.list_movies(genre="Sci-Fi")["movies"]
        assert {m["title"] for m in sci_fi} == {"Inception", "The Matrix"}
        from_1994 = store.list_movies(year=1994, sort_by="title")["movies"]
        assert [m["title"] for m in from_1994] == [
            "Forrest Gump", "Pulp Fiction", "The Shawshank Redemption"
        ]

    def test_min_rating_and_rating_sort(self, store):
        store.add_review("7", 5, REVIEW_TEXT)
        store.add_review("3", 3, REVIEW_TEXT)
        rated = store.list_movies(min_rating=3, sort_by="rating")["movies"]
        assert [m["_id"] for m in rated] == ["7", "3"]

    def test_year_sort_breaks_ties_by_id(self, store):
        movies = store.list_movies(sort_by="year", limit=50)["movies"]
        assert movies[0]["title"] == "Inception"
        nineties = [m["_id"] for m in movies if m["releaseYear"] == 1994]
        assert nineties == ["1", "4", "5"]

    def test_invalid_query(self, store):
        with pytest.raises(ClientValidationError):
            store.list_movies(limit=100)

    def test_featured(self, store):
        store.add_review("2", 5, REVIEW_TEXT)
        result = store.featured_movies()
        assert len(result["featured"]) == 6
        assert result["featured"][0]["_id"] == "2"
        assert result["recent"][0]["_id"] == "10"

    def test_get_movie(self, store):
        store.add_to_watchlist("4")
        movie = store.get_movie("4")
        assert movie["title"] == "Pulp Fiction"
        assert movie["reviews"] == []
        assert movie["isInWatchlist"] is True
        assert store.get_movie("5")["isInWatchlist"] is False

    def test_unknown_movie(self, store):
        with pytest.raises(NotFoundError):
            store.get_movie("999")

    def test_results_are_copies(self, store):
        movie = store.get_movie("1")
        movie["title"] = "Changed"
        assert store.get_movie("1")["title"] == "The Shawshank Redemption"


class TestDemoReviews:

    def test_add_review_updates_rating(self, store):
        review = store.add_review("1", 4, REVIEW_TEXT)
        assert review["_id"] == "demo-review-1"
        assert review["userId"]["username"] == "Demo User"
        movie = store.get_movie("1")
        assert (movie["averageRating"], movie["totalReviews"]) == (4.0, 1)
        assert movie["reviews"][0]["_id"] == "demo-review-1"

    def test_second_review_conflicts(self, store):
        store.add_review("1", 4, REVIEW_TEXT)
        with pytest.raises(ConflictError) as exc_info:
            store.add_review("1", 2, REVIEW_TEXT)
        assert exc_info.value.code == "already_reviewed"
        assert store.get_movie("1")["totalReviews"] == 1

    def test_removed_review_still_blocks(self, store):
        review = store.add_review("1", 4, REVIEW_TEXT)
        store.delete_review(review["_id"])
        with pytest.raises(ConflictError):
            store.add_review("1", 5, REVIEW_TEXT)

    def test_update_and_delete_recompute(self, store):
        review = store.add_review("2", 2, REVIEW_TEXT)
        updated = store.update_review(review["_id"], rating=5)
        assert updated["isEdited"] is True
        assert updated["editedAt"] is not None
        assert store.get_movie("2")["averageRating"] == 5.0

        store.delete_review(review["_id"])
        movie = store.get_movie("2")
        assert (movie["averageRating"], movie["totalReviews"]) == (0.0, 0)
        assert movie["reviews"] == []

    def test_update_without_changes_is_not_an_edit(self, store):
        review = store.add_review("2", 2, REVIEW_TEXT)
        assert store.update_review(review["_id"])["isEdited"] is False

    def test_delete_twice(self, store):
        review = store.add_review("3", 3, REVIEW_TEXT)
        store.delete_review(review["_id"])
        with pytest.raises(NotFoundError):
            store.delete_review(review["_id"])
        with pytest.raises(NotFoundError):
            store.update_review(review["_id"], rating=4)

    def test_invalid_review(self, store):
        with pytest.raises(ClientValidationError) as exc_info:
            store.add_review("1", 6, "too short")
        fields = {d["field"] for d in exc_info.value.details}
        assert fields == {"rating", "reviewText"}

    def test_review_of_unknown_movie(self, store):
        with pytest.raises(NotFoundError):
            store.add_review("999", 3, REVIEW_TEXT)

    def test_review_listings_newest_first(self, store):
        for movie_id in ("1", "2", "3"):
            store.add_review(movie_id, 4, REVIEW_TEXT)

        mine = store.list_user_reviews(limit=2)
        assert [r["movieId"]["_id"] for r in mine["reviews"]] == ["3", "2"]
        assert mine["reviews"][0]["movieId"]["title"] == "The Dark Knight"
        assert mine["pagination"]["totalReviews"] == 3
        assert mine["pagination"]["hasNext"] is True

        for_movie = store.list_movie_reviews("2")
        assert [r["movieId"] for r in for_movie["reviews"]] == ["2"]

    def test_profile_rename_updates_review_cards(self, store):
        store.add_review("1", 4, REVIEW_TEXT)
        store.update_profile(username="Renamed")
        assert store.get_movie("1")["reviews"][0]["userId"]["username"] == "Renamed"


class TestDemoWatchlist:

    def test_insertion_order(self, store):
        store.add_to_watchlist("3")
        watchlist = store.add_to_watchlist("1")
        assert [m["_id"] for m in watchlist] == ["3", "1"]
        assert all("addedAt" in m for m in watchlist)

    def test_duplicate_conflicts(self, store):
        store.add_to_watchlist("3")
        with pytest.raises(ConflictError) as exc_info:
            store.add_to_watchlist("3")
        assert exc_info.value.code == "already_in_watchlist"
        assert len(store.get_watchlist()) == 1

    def test_remove_absent_is_noop(self, store):
        store.add_to_watchlist("3")
        assert [m["_id"] for m in store.remove_from_watchlist("8")] == ["3"]
        assert store.remove_from_watchlist("3") == []

    def test_unknown_movie(self, store):
        with pytest.raises(NotFoundError):
            store.add_to_watchlist("999")


class TestDemoProfile:

    def test_profile(self, store):
        store.add_to_watchlist("5")
        store.add_review("5", 5, REVIEW_TEXT)
        profile = store.get_profile()
        assert profile["username"] == "Demo User"
        assert profile["reviewCount"] == 1
        assert [m["_id"] for m in profile["watchlist"]] == ["5"]

    def test_update_only_writable_fields(self, store):
        updated = store.update_profile(bio="Night owl", favoriteGenres=["Horror"], isAdmin=True)
        assert updated["bio"] == "Night owl"
        assert updated["favoriteGenres"] == ["Horror"]
        assert updated["isAdmin"] is False

    def test_login_accepts_demo_accounts(self, store):
        result = store.login("ADMIN@test.com", "anything")
        assert result["user"]["isAdmin"] is True
        assert result["token"] == "demo-token-demo-user-1"

    def test_login_rejects_unknown_account(self, store):
        with pytest.raises(AuthError) as exc_info:
            store.login("stranger@example.com", "password123")
        assert exc_info.value.reason == "invalid_credentials"
        assert exc_info.value.status_code == 401

    def test_register_validates(self, store):
        with pytest.raises(ClientValidationError):
            store.register("ab", "bad", "123")
        result = store.register("newfan", "newfan@example.com", "secret1")
        assert result["user"]["username"] == "newfan"


class TestDemoPersistence:

    def test_state_survives_reload(self, tmp_path):
        path = str(tmp_path / "demo.json")
        store = DemoStore(path)
        store.add_review("1", 3, REVIEW_TEXT)
        store.add_to_watchlist("2")

        reloaded = DemoStore(path)
        assert reloaded.get_movie("1")["totalReviews"] == 1
        assert [m["_id"] for m in reloaded.get_watchlist()] == ["2"]
        with pytest.raises(ConflictError):
            reloaded.add_review("1", 4, REVIEW_TEXT)
        assert not (tmp_path / "demo.json.tmp").exists()

    def test_unreadable_file_reseeds(self, tmp_path):
        path = tmp_path / "demo.json"
        path.write_text("{not json", encoding="utf-8")
        store = DemoStore(str(path))
        assert store.list_movies()["pagination"]["totalMovies"] == 10

    def test_reset_restores_seed(self, tmp_path):
        path = tmp_path / "demo.json"
        store = DemoStore(str(path))
        store.add_review("1", 3, REVIEW_TEXT)
        store.add_to_watchlist("2")
        store.update_profile(bio="Changed")

        store.reset()

        assert store.get_movie("1")["totalReviews"] == 0
        assert store.get_watchlist() == []
        assert store.get_profile()["bio"] == "Movie enthusiast and avid reviewer"
        saved = json.loads(path.read_text(encoding="utf-8"))
        assert saved["reviews"] == []

    def test_failed_write_changes_nothing(self, tmp_path):
        state_dir = tmp_path / "state"
        store = DemoStore(str(state_dir / "demo.json"))

        with pytest.raises(StorageError) as exc_info:
            store.add_review("1", 4, REVIEW_TEXT)
        assert isinstance(exc_info.value.original_error, OSError)
        with pytest.raises(StorageError):
            store.add_to_watchlist("2")

        movie = store.get_movie("1")
        assert (movie["averageRating"], movie["totalReviews"]) == (0.0, 0)
        assert movie["reviews"] == []
        assert store.get_watchlist() == []

        state_dir.mkdir()
        assert store.add_review("1", 4, REVIEW_TEXT)["_id"] == "demo-review-1"
        assert store.get_movie("1")["totalReviews"] == 1
