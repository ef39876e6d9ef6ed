"""
LinkCrawler package initializer.
Defines package version; the CLI lives in :mod:`link_crawler.cli`.
"""
__version__ = "0.1.0"
