"""gamereviews: renders a personal catalog of game reviews into a static HTML page.

Review metadata (title, release date, cover, genres) is fetched from the IGDB
API through a rate-limited, cache-aside batch resolver.
"""

__version__ = "0.3.0"
