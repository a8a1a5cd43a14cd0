import pytest

from cinereview.models import Movie
from cinereview.pagination import Page, paginate


class TestPage:

    @pytest.mark.parametrize('page, limit, total, pages, has_next, has_prev', [
        (1, 10, 0, 0, False, False),
        (1, 10, 10, 1, False, False),
        (1, 10, 11, 2, True, False),
        (2, 10, 11, 2, False, True),
        (3, 5, 30, 6, True, True),
        (7, 5, 30, 6, False, True),
    ])
    def test_metadata(self, page, limit, total, pages, has_next, has_prev):
        meta = Page(items=[], page=page, limit=limit, total=total).metadata('totalMovies')
        assert meta == {
            'currentPage': page,
            'totalPages': pages,
            'totalMovies': total,
            'limit': limit,
            'hasNext': has_next,
            'hasPrev': has_prev,
        }

    def test_total_key_is_configurable(self):
        meta = Page(items=[], page=1, limit=10, total=3).metadata('totalReviews')
        assert meta['totalReviews'] == 3
        assert 'totalMovies' not in meta


class TestPaginate:

    def test_slices_ordered_query(self, app, make_movie):
        for i in range(5):
            make_movie(title=f'Film {i}')
        with app.app_context():
            page = paginate(Movie.query.order_by(Movie.id.asc()), page=2, limit=2)
            assert [m.title for m in page.items] == ['Film 2', 'Film 3']
            assert page.total == 5
            assert page.has_next
