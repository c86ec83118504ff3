"""Shared fixtures: the movie/cinema sample tables."""

import pytest

from helpers import GALAXY_QUEST, RAMBO, ROCKY, make_movie_table
from relational_tables import Table


@pytest.fixture
def movie():
    """The four-row movie table."""
    return make_movie_table()


@pytest.fixture
def cinema():
    """A movie-schema table overlapping movie on Rocky and Rambo."""
    return make_movie_table("cinema", (ROCKY, RAMBO, GALAXY_QUEST))


@pytest.fixture
def studio():
    """Studios keyed by name."""
    table = Table("studio", "name address presNo", "String String Integer", "name")
    table.insert(("Fox", "Los_Angeles", 7777))
    table.insert(("Universal", "Universal_City", 8888))
    table.insert(("DreamWorks", "Glendale", 9999))
    return table
