"""Shared limits for the answer engine."""

MAX_RESULTS_PER_QUERY = 2
MAX_TOTAL_RESULTS = 6
MAX_SUB_QUERIES = 3
MAX_IMAGES = 3
EXCERPT_LEN = 200

# Queries shorter than this (without " and " or "?") skip optimisation
SIMPLE_QUERY_LEN = 50

DIRECT_ANSWER_TITLE = "Direct Answer"
