import os
import re
from urllib.parse import quote

import requests

from models import SearchResult, VocabularyPair
from utils import logging
from utils.http import session, HTTP_TIMEOUT
from .tables import extract_vocabulary

WIKTIONARY_API_URL = os.getenv("WIKTIONARY_API_URL", "https://en.wiktionary.org/w/api.php")
WIKTIONARY_PAGE_URL = os.getenv("WIKTIONARY_PAGE_URL", "https://en.wiktionary.org/wiki/")

SWADESH_TITLE = re.compile(r"swadesh list", re.IGNORECASE)


def title_guesses(language_name: str) -> list[str]:
    name = language_name.strip()
    return [
        f"Appendix:Swadesh list ({name})",
        f"Appendix:Swadesh list ({name} language)",
        f"Appendix:{name} Swadesh list",
        f"{name} Swadesh list",
        f"Swadesh list ({name})",
    ]


def call_api(params: dict):
    response = session.get(WIKTIONARY_API_URL, params={**params, "format": "json"}, timeout=HTTP_TIMEOUT)
    response.raise_for_status()
    return response.json()


def search_swadesh_page(language_name: str) -> SearchResult | None:
    logging.info(f"Searching Wiktionary Swadesh list for {language_name}")

    for query in title_guesses(language_name):
        try:
            data = call_api({"action": "query", "list": "search", "srsearch": query})
            hits = (data.get("query") or {}).get("search") or []
            if hits and hits[0].get("title") and SWADESH_TITLE.search(hits[0]["title"]):
                logging.info(f"Found Swadesh page {hits[0]['title']} for query {query}")
                return SearchResult(title=hits[0]["title"], pageId=hits[0].get("pageid"))
        except (requests.RequestException, ValueError) as e:
            logging.debug(f"Search pattern {query} failed: {str(e)}")

    # Final fallback: opensearch
    try:
        data = call_api({"action": "opensearch", "search": f"{language_name.strip()} Swadesh list", "limit": 5})
        titles = data[1] if isinstance(data, list) and len(data) > 1 else []
        title = next((t for t in titles if SWADESH_TITLE.search(t)), None)
        if title:
            logging.info(f"Found Swadesh page {title} via opensearch")
            return SearchResult(title=title)
    except (requests.RequestException, ValueError) as e:
        logging.debug(f"Opensearch for {language_name} failed: {str(e)}")

    logging.info(f"No Swadesh page found for {language_name}")
    return None


def fetch_page_html(title: str) -> str:
    try:
        data = call_api({"action": "parse", "page": title, "prop": "text"})
    except (requests.RequestException, ValueError) as e:
        logging.warning(f"Failed to fetch page {title}: {str(e)}")
        return ""
    return ((data.get("parse") or {}).get("text") or {}).get("*", "")


def parse_swadesh_table(title: str, language_name: str, **limits) -> list[VocabularyPair]:
    logging.info(f"Parsing Swadesh tables on {title} for {language_name}")
    html = fetch_page_html(title)
    if not html:
        return []
    return extract_vocabulary(html, language_name, **limits)


def page_url(title: str) -> str:
    return WIKTIONARY_PAGE_URL + quote(title, safe="!*'()")
