"""Sync arXiv papers saved in Instapaper into an Obsidian vault."""

__version__ = "0.1.0"
