"""CineReview: movie catalog, reviews with derived ratings, and watchlists."""

__version__ = "1.0.0"
