"""Markdown content pipeline: fetch, parse, render, and cache site pages."""

__version__ = "1.0.0"
