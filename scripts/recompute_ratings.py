#!/usr/bin/env python3
"""
Rating repair script.
Re-derives averageRating/totalReviews of every movie from its active reviews.
Use after bulk imports or manual edits to the reviews table.
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cinereview.aggregation import recompute_all_ratings
from cinereview.app import create_app
from cinereview.logging_metrics import track_phase


def main():
    app = create_app()
    with app.app_context():
        with track_phase("ratings_repair"):
            count = recompute_all_ratings()
    print(f"Recomputed ratings for {count} movie(s).")


if __name__ == "__main__":
    main()
