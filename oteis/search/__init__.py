"""Bilingual fuzzy search over model elements."""

from oteis.search.resolver import QueryResolver, matches_term, resolve_query
from oteis.search.terms import expand_terms

__all__ = ["QueryResolver", "expand_terms", "matches_term", "resolve_query"]
