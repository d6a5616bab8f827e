"""Scrape Agent - node-local metrics source resolution for Kubernetes."""

__version__ = "0.1.0"
