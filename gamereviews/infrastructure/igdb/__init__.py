"""IGDB API adapter: Twitch authentication, bulk fetches and search.

Bounded Context: Remote Metadata
"""
