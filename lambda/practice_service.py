from fastapi import HTTPException

import wiktionary_service
from models import *
from utils import logging


def get_practice(language_name: str | None, language_code: str | None, **limits) -> PracticeResponse:
    if not (language_name or "").strip() and not (language_code or "").strip():
        raise HTTPException(status_code=400, detail="Missing languageName or languageCode")

    # Without a name, the code is the only thing worth searching for
    name = (language_name or "").strip() or language_code.strip()
    logging.info(f"Getting practice vocabulary for {name} ({language_code})")

    search = wiktionary_service.search_swadesh_page(name)
    if search is None:
        return PracticeResponse(message=f"No Wiktionary Swadesh list found for {name}")

    vocabulary = wiktionary_service.parse_swadesh_table(search.title, name, **limits)
    logging.info(f"Extracted {len(vocabulary)} pairs from {search.title}")

    return PracticeResponse(
        practice=PracticeContent(vocabulary=vocabulary),
        source=PracticeSource(title=search.title, url=wiktionary_service.page_url(search.title)),
    )
