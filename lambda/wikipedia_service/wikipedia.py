import os
from urllib.parse import quote

import requests

from utils import logging
from utils.http import session, HTTP_TIMEOUT

WIKIPEDIA_SUMMARY_URL = os.getenv("WIKIPEDIA_SUMMARY_URL", "https://en.wikipedia.org/api/rest_v1/page/summary/")


def fetch_summary(title: str) -> dict | None:
    url = WIKIPEDIA_SUMMARY_URL + quote(title, safe="")
    try:
        response = session.get(url, params={"redirect": "true"}, timeout=HTTP_TIMEOUT)
        if not response.ok:
            logging.info(f"No Wikipedia summary for {title} ({response.status_code})")
            return None
        return response.json()
    except (requests.RequestException, ValueError) as e:
        logging.warning(f"Error fetching Wikipedia summary for {title}: {str(e)}")
        return None


def find_language_summary(language_name: str) -> dict | None:
    name = language_name.strip()
    for candidate in [name, f"{name} language"]:
        summary = fetch_summary(candidate)
        if summary and summary.get("extract"):
            return summary
    return None
