"""HTML rendering of the review catalog with Jinja2 templates."""
