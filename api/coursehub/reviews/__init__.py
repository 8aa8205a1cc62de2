"""Course reviews module.

One review per student and course, with a maintained average rating.
"""

from coursehub.reviews.models import REVIEWS_TABLES_CQL, Review


__all__ = [
    "REVIEWS_TABLES_CQL",
    "Review",
]
