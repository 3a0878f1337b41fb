from .wiktionary import search_swadesh_page, parse_swadesh_table, fetch_page_html, page_url
from .tables import extract_vocabulary, detect_columns

__all__ = ['search_swadesh_page', 'parse_swadesh_table', 'fetch_page_html', 'page_url', 'extract_vocabulary', 'detect_columns']
