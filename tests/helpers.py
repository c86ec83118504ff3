"""Sample movie rows and a factory for movie-schema tables."""

from relational_tables import Table

MOVIE_ATTRIBUTES = "title year length genre studioName producerNo"
MOVIE_DOMAINS = "String Integer Integer String String Integer"
MOVIE_KEY = "title year"

STAR_WARS = ("Star_Wars", 1977, 124, "sciFi", "Fox", 12345)
STAR_WARS_2 = ("Star_Wars_2", 1980, 124, "sciFi", "Fox", 12345)
ROCKY = ("Rocky", 1985, 200, "action", "Universal", 12125)
RAMBO = ("Rambo", 1978, 100, "action", "Universal", 32355)
GALAXY_QUEST = ("Galaxy_Quest", 1999, 104, "comedy", "DreamWorks", 67890)


def make_movie_table(name="movie", rows=(STAR_WARS, STAR_WARS_2, ROCKY, RAMBO), **kwargs):
    """Create a movie-schema table and insert ``rows`` into it."""
    table = Table(name, MOVIE_ATTRIBUTES, MOVIE_DOMAINS, MOVIE_KEY, **kwargs)
    for row in rows:
        table.insert(row)
    return table
