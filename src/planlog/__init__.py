"""planlog - journals, pages and status-bearing blocks with tags, links and views."""

__version__ = "0.1.0"
