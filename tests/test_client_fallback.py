"""
Tests for CineReviewClient demo-mode fallback.

Only TransientError moves a call to the demo store; every other client
error is an answer from the server and must reach the caller.
"""

import pytest
from unittest.mock import Mock, patch

from cinereview.client import (
    AuthError,
    CineReviewClient,
    ConflictError,
    DemoStore,
    HttpStore,
    MovieStore,
    NotFoundError,
    TransientError,
)
from cinereview.metrics import demo_fallbacks_total


@pytest.fixture
def remote():
    return Mock(spec=HttpStore)


@pytest.fixture
def demo():
    return DemoStore()


@pytest.fixture
def client(remote, demo):
    return CineReviewClient(remote=remote, fallback=demo)


class TestRemoteFirst:

    def test_success_uses_remote(self, client, remote):
        remote.list_movies.return_value = {"movies": [{"_id": 1}], "pagination": {}}

        result = client.list_movies(page=2, genre="Drama")

        assert result == {"movies": [{"_id": 1}], "pagination": {}}
        remote.list_movies.assert_called_once_with(page=2, genre="Drama")
        assert client.demo_mode is False

    @pytest.mark.parametrize("error", [
        AuthError("Token expired", 401, "expired"),
        NotFoundError("Movie not found"),
        ConflictError("Movie already in watchlist", "already_in_watchlist"),
    ])
    def test_server_answers_propagate(self, client, remote, error):
        remote.add_to_watchlist.side_effect = error

        with pytest.raises(type(error)):
            client.add_to_watchlist(3)

        assert client.demo_mode is False
        assert client.fallback.get_watchlist() == []


    @pytest.mark.parametrize("name", sorted(MovieStore.__abstractmethods__))
    def test_every_store_method_delegates(self, client, remote, name):
        delegate = getattr(CineReviewClient, name)
        assert delegate.__doc__
        assert delegate.__wrapped__.__name__ == name

        getattr(remote, name).return_value = {"from": "remote"}
        assert getattr(client, name)("arg") == {"from": "remote"}
        getattr(remote, name).assert_called_once_with("arg")


class TestDemoFallback:

    def test_transient_error_switches_to_demo(self, client, remote):
        remote.list_movies.side_effect = TransientError("ConnectionError: refused")

        with patch("cinereview.client.fallback.logger") as logger:
            result = client.list_movies(sort_by="title", limit=3)

        assert [m["title"] for m in result["movies"]] == ["Fight Club", "Forrest Gump", "Goodfellas"]
        assert client.demo_mode is True
        logger.warning.assert_called_once()
        assert logger.warning.call_args[0][0] == "demo_mode_fallback"
        assert logger.warning.call_args[1]["operation"] == "list_movies"

    def test_fallback_is_counted(self, client, remote):
        remote.get_movie.side_effect = TransientError("Service unavailable", 503)
        initial = demo_fallbacks_total.labels(operation="get_movie")._value.get()

        client.get_movie("1")

        assert demo_fallbacks_total.labels(operation="get_movie")._value.get() == initial + 1

    def test_demo_mode_clears_when_remote_recovers(self, client, remote):
        remote.featured_movies.side_effect = [
            TransientError("Service unavailable", 503),
            {"featured": [], "recent": []},
        ]

        client.featured_movies()
        assert client.demo_mode is True
        assert client.featured_movies() == {"featured": [], "recent": []}
        assert client.demo_mode is False

    def test_demo_rules_apply_offline(self, client, remote):
        remote.add_review.side_effect = TransientError("timeout")
        remote.get_movie.side_effect = TransientError("timeout")

        client.add_review("1", 4, "Hope is a good thing, maybe the best.")
        with pytest.raises(ConflictError):
            client.add_review("1", 5, "Watched it again and liked it more.")

        movie = client.get_movie("1")
        assert (movie["averageRating"], movie["totalReviews"]) == (4.0, 1)

    def test_without_fallback_transient_error_propagates(self, remote):
        client = CineReviewClient(remote=remote, enable_demo=False)
        remote.get_watchlist.side_effect = TransientError("timeout")

        with pytest.raises(TransientError):
            client.get_watchlist()
        assert client.fallback is None


class TestLogout:

    def test_logout_discards_demo_state(self, client, remote, demo):
        remote.add_to_watchlist.side_effect = TransientError("timeout")
        client.add_to_watchlist("2")
        assert len(demo.get_watchlist()) == 1

        client.logout()

        remote.reset.assert_called_once_with()
        assert demo.get_watchlist() == []
        assert client.demo_mode is False

    def test_default_stores(self):
        client = CineReviewClient(remote=HttpStore(base_url="http://api.test/api"))
        assert isinstance(client.fallback, DemoStore)
        client.logout()
        assert client.remote.token is None
