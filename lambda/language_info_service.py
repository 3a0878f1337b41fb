from fastapi import HTTPException

import wikipedia_service
from models import *
from utils import logging


def render_language_info(summary: dict, language_name: str, language_code: str = None) -> str:
    display_title = (summary.get("titles") or {}).get("display") or language_name
    description = summary.get("description") or ""
    extract = summary.get("extract") or ""
    urls = summary.get("content_urls") or {}
    page_url = (urls.get("desktop") or {}).get("page") or (urls.get("mobile") or {}).get("page")

    title_md = f"# {display_title}"
    overview_md = f"\n\n**Overview**: {description}\n" if description else ""
    code_md = f"\n\nLanguage Code: `{language_code}`" if language_code else ""
    source_md = f"\n\nSources:\n- [Wikipedia]({page_url})" if page_url else ""

    return f"{title_md}{overview_md}\n{extract}{code_md}{source_md}"


def get_language_info(language_name: str | None, language_code: str | None) -> LanguageInfoResponse:
    if not (language_name or "").strip():
        raise HTTPException(status_code=400, detail="Language name is required")

    logging.info(f"Fetching information for language: {language_name}")
    summary = wikipedia_service.find_language_summary(language_name)
    if summary is None:
        logging.info(f"No Wikipedia summary found for {language_name}")
        raise HTTPException(status_code=404, detail="No Wikipedia summary found for this language")

    return LanguageInfoResponse(
        languageInfo=render_language_info(summary, language_name, language_code),
        languageName=language_name,
        languageCode=language_code,
    )
