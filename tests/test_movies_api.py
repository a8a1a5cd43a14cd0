"""
Tests for the catalog endpoints.

Covers listing filters, sort keys, pagination metadata, detail with
recent reviews and watchlist flag, featured sets, and admin CRUD.
"""

from datetime import datetime, timedelta

import pytest

from cinereview.models import db, Movie, RecordStatus, Review, WatchlistEntry


def _titles(response):
    return [movie['title'] for movie in response.get_json()['movies']]


@pytest.fixture
def catalog(make_movie):
    """Four movies with distinct years, ratings and creation times."""
    base = datetime(2024, 1, 1)
    return {
        'alien': make_movie(title='Alien', genres=['Horror', 'Sci-Fi'], release_year=1979,
                            director='Ridley Scott', average_rating=4.5, total_reviews=10,
                            created_at=base),
        'heat': make_movie(title='Heat', genres=['Crime', 'Drama'], release_year=1995,
                           director='Michael Mann', average_rating=4.0, total_reviews=3,
                           synopsis='A thief and a detective circle each other in Los Angeles.',
                           created_at=base + timedelta(days=1)),
        'up': make_movie(title='Up', genres=['Animation'], release_year=2009,
                         director='Pete Docter', average_rating=4.5, total_reviews=20,
                         created_at=base + timedelta(days=2)),
        'brick': make_movie(title='Brick', genres=['Crime'], release_year=2005,
                            director='Rian Johnson', average_rating=3.0, total_reviews=2,
                            created_at=base + timedelta(days=3)),
    }


class TestListMovies:

    def test_default_is_newest_first(self, client, catalog):
        response = client.get('/api/movies')
        assert response.status_code == 200
        assert _titles(response) == ['Brick', 'Up', 'Heat', 'Alien']

    def test_pagination_metadata(self, client, catalog):
        data = client.get('/api/movies?page=2&limit=3').get_json()
        assert [m['title'] for m in data['movies']] == ['Alien']
        assert data['pagination'] == {
            'currentPage': 2,
            'totalPages': 2,
            'totalMovies': 4,
            'limit': 3,
            'hasNext': False,
            'hasPrev': True,
        }

    def test_has_next(self, client, catalog):
        pagination = client.get('/api/movies?page=1&limit=2').get_json()['pagination']
        assert pagination['hasNext'] is True
        assert pagination['hasPrev'] is False

    def test_page_beyond_end_is_empty(self, client, catalog):
        data = client.get('/api/movies?page=9&limit=2').get_json()
        assert data['movies'] == []
        assert data['pagination']['totalMovies'] == 4

    def test_search_is_case_insensitive_over_title_synopsis_director(self, client, catalog):
        assert _titles(client.get('/api/movies?search=ALIEN')) == ['Alien']
        assert _titles(client.get('/api/movies?search=los angeles')) == ['Heat']
        assert _titles(client.get('/api/movies?search=johnson')) == ['Brick']

    def test_search_treats_wildcards_literally(self, client, catalog):
        assert _titles(client.get('/api/movies?search=%25')) == []

    def test_genre_membership(self, client, catalog):
        assert _titles(client.get('/api/movies?genre=Crime')) == ['Brick', 'Heat']
        assert _titles(client.get('/api/movies?genre=crime')) == []

    def test_year_and_min_rating(self, client, catalog):
        assert _titles(client.get('/api/movies?year=1995')) == ['Heat']
        assert _titles(client.get('/api/movies?minRating=4.5')) == ['Up', 'Alien']

    def test_sort_by_rating_breaks_ties_by_id(self, client, catalog):
        assert _titles(client.get('/api/movies?sortBy=rating')) == ['Alien', 'Up', 'Heat', 'Brick']

    def test_sort_by_year_and_title(self, client, catalog):
        assert _titles(client.get('/api/movies?sortBy=year')) == ['Up', 'Brick', 'Heat', 'Alien']
        assert _titles(client.get('/api/movies?sortBy=title')) == ['Alien', 'Brick', 'Heat', 'Up']

    def test_unknown_sort_falls_back_to_newest(self, client, catalog):
        assert _titles(client.get('/api/movies?sortBy=popularity')) == ['Brick', 'Up', 'Heat', 'Alien']

    def test_removed_movies_hidden(self, client, make_movie):
        make_movie(title='Visible')
        make_movie(title='Gone', status=RecordStatus.REMOVED)
        assert _titles(client.get('/api/movies')) == ['Visible']

    @pytest.mark.parametrize('query, field', [
        ('limit=51', 'limit'),
        ('limit=0', 'limit'),
        ('page=0', 'page'),
        ('page=abc', 'page'),
        ('minRating=6', 'minRating'),
        ('year=1800', 'year'),
    ])
    def test_invalid_parameters(self, client, query, field):
        response = client.get(f'/api/movies?{query}')
        assert response.status_code == 400
        details = response.get_json()['error']['details']
        assert [d['field'] for d in details] == [field]

    def test_blank_parameters_use_defaults(self, client, catalog):
        data = client.get('/api/movies?page=&limit=&genre=&sortBy=').get_json()
        assert data['pagination']['currentPage'] == 1
        assert data['pagination']['limit'] == 12
        assert len(data['movies']) == 4


class TestMovieDetail:

    def test_detail_with_recent_reviews(self, app, client, make_movie, make_user):
        movie = make_movie()
        with app.app_context():
            for i in range(12):
                user = make_user()
                db.session.add(Review(user_id=user.id, movie_id=movie.id, rating=4,
                                      review_text=f'Review number {i} is long enough.'))
            removed_author = make_user()
            db.session.add(Review(user_id=removed_author.id, movie_id=movie.id, rating=1,
                                  review_text='Removed review text.', status=RecordStatus.REMOVED))
            db.session.commit()

        data = client.get(f'/api/movies/{movie.id}').get_json()
        assert data['title'] == movie.title
        assert len(data['reviews']) == 10
        assert data['reviews'][0]['reviewText'] == 'Review number 11 is long enough.'
        assert all(r['status'] == 'active' for r in data['reviews'])
        assert set(data['reviews'][0]['userId']) == {'_id', 'id', 'username', 'profilePicture'}
        assert data['isInWatchlist'] is False

    def test_watchlist_flag_for_viewer(self, app, client, make_movie, make_user, auth_headers):
        movie = make_movie()
        user = make_user()
        with app.app_context():
            db.session.add(WatchlistEntry(user_id=user.id, movie_id=movie.id))
            db.session.commit()

        data = client.get(f'/api/movies/{movie.id}', headers=auth_headers(user)).get_json()
        assert data['isInWatchlist'] is True

    def test_missing_and_removed_are_404(self, client, make_movie):
        removed = make_movie(status=RecordStatus.REMOVED)
        assert client.get('/api/movies/9999').status_code == 404
        response = client.get(f'/api/movies/{removed.id}')
        assert response.status_code == 404
        assert response.get_json()['error']['type'] == 'not_found'


class TestFeatured:

    def test_featured_and_recent(self, client, catalog):
        data = client.get('/api/movies/featured/trending').get_json()
        # Equal ratings ordered by review count
        assert [m['title'] for m in data['featured']] == ['Up', 'Alien', 'Heat', 'Brick']
        assert [m['title'] for m in data['recent']] == ['Brick', 'Up', 'Heat', 'Alien']

    def test_featured_capped_at_six(self, client, make_movie):
        for _ in range(8):
            make_movie()
        data = client.get('/api/movies/featured/trending').get_json()
        assert len(data['featured']) == 6
        assert len(data['recent']) == 6


NEW_MOVIE = {
    'title': 'Arrival',
    'genre': ['Drama', 'Sci-Fi'],
    'releaseYear': 2016,
    'director': 'Denis Villeneuve',
    'cast': ['Amy Adams', 'Jeremy Renner'],
    'synopsis': 'A linguist works with the military to communicate with alien lifeforms.',
    'duration': 116,
}


class TestAdminCrud:

    @pytest.fixture
    def admin_headers(self, make_user, auth_headers):
        return auth_headers(make_user(is_admin=True))

    def test_create_ignores_client_aggregates(self, app, client, admin_headers):
        body = dict(NEW_MOVIE, averageRating=5.0, totalReviews=999)
        response = client.post('/api/movies', json=body, headers=admin_headers)
        assert response.status_code == 201
        movie = response.get_json()['movie']
        assert movie['averageRating'] == 0.0
        assert movie['totalReviews'] == 0
        assert movie['genre'] == ['Drama', 'Sci-Fi']
        assert movie['language'] == 'English'

        with app.app_context():
            assert Movie.query.filter_by(title='Arrival').one().is_active

    def test_create_validation(self, client, admin_headers):
        body = dict(NEW_MOVIE, genre=[], releaseYear=1850, duration=0)
        response = client.post('/api/movies', json=body, headers=admin_headers)
        assert response.status_code == 400
        fields = {d['field'] for d in response.get_json()['error']['details']}
        assert fields == {'genre', 'releaseYear', 'duration'}

    def test_create_rejects_far_future_year(self, client, admin_headers):
        body = dict(NEW_MOVIE, releaseYear=datetime.now().year + 6)
        assert client.post('/api/movies', json=body, headers=admin_headers).status_code == 400

    def test_partial_update(self, client, make_movie, admin_headers):
        movie = make_movie(title='Old Title', average_rating=3.5, total_reviews=2)
        response = client.put(f'/api/movies/{movie.id}', json={
            'title': 'New Title',
            'genre': ['Comedy', 'Drama'],
            'averageRating': 1.0,
        }, headers=admin_headers)
        assert response.status_code == 200
        updated = response.get_json()['movie']
        assert updated['title'] == 'New Title'
        assert updated['genre'] == ['Comedy', 'Drama']
        assert updated['averageRating'] == 3.5
        assert updated['director'] == movie.director

    def test_update_keeps_existing_genre_rows(self, client, make_movie, admin_headers):
        movie = make_movie(genres=['Drama', 'Crime'])
        response = client.put(f'/api/movies/{movie.id}', json={'genre': ['Crime', 'Drama', 'Thriller']},
                              headers=admin_headers)
        assert response.status_code == 200
        assert response.get_json()['movie']['genre'] == ['Crime', 'Drama', 'Thriller']
        assert _titles(client.get('/api/movies?genre=Thriller')) == [movie.title]

    def test_delete_is_soft(self, app, client, make_movie, admin_headers):
        movie = make_movie()
        response = client.delete(f'/api/movies/{movie.id}', headers=admin_headers)
        assert response.status_code == 200
        assert client.get(f'/api/movies/{movie.id}').status_code == 404

        with app.app_context():
            assert db.session.get(Movie, movie.id).status == RecordStatus.REMOVED

    def test_update_removed_movie_is_404(self, client, make_movie, admin_headers):
        movie = make_movie(status=RecordStatus.REMOVED)
        response = client.put(f'/api/movies/{movie.id}', json={'title': 'X'}, headers=admin_headers)
        assert response.status_code == 404
