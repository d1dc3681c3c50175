"""Utility modules for rssdd."""
