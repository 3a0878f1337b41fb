from .wikipedia import fetch_summary, find_language_summary

__all__ = ['fetch_summary', 'find_language_summary']
