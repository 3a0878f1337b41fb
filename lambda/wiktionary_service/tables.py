"""
Best-effort extraction of vocabulary pairs from Swadesh-list wikitables.

Column roles are guessed from the header cells, so results are a signal and
not a guarantee: pages change shape and some tables will be misread.
"""
import os
import re

from bs4 import BeautifulSoup

from models import VocabularyPair
from utils import logging

ENGLISH_KEYS = ("english", "gloss", "meaning", "translation", "concept")
EXCLUDED_KEYS = ("no", "number", "proto", "ipa", "pos", "notes", "source", "root")

SWAP_IDENTICAL_RATIO = float(os.getenv("SWAP_IDENTICAL_RATIO", "0.6"))
EARLY_RETURN_PAIRS = int(os.getenv("EARLY_RETURN_PAIRS", "10"))
MAX_RETURNED_PAIRS = int(os.getenv("MAX_RETURNED_PAIRS", "30"))
MAX_TABLE_PAIRS = int(os.getenv("MAX_TABLE_PAIRS", "50"))
MAX_ROWS_PER_WALK = int(os.getenv("MAX_ROWS_PER_WALK", "80"))

# brackets, braces and digits mark footnotes and reconstructed forms
_NOISE_CHARS = re.compile(r"[\[\]{}0-9]")
_WHITESPACE = re.compile(r"\s+")


def cell_text(cell) -> str:
    return _WHITESPACE.sub(" ", cell.get_text()).strip()


def find_wikitables(html: str) -> list:
    if not html:
        return []
    soup = BeautifulSoup(html, "html.parser")
    return [t for t in soup.find_all("table") if any("wikitable" in c for c in t.get("class", []))]


def header_labels(table) -> list[str]:
    # The first row carrying <th> cells is taken as the header row
    for tr in table.find_all("tr"):
        headers = tr.find_all("th", recursive=False)
        if headers:
            return [cell_text(th).lower() for th in tr.find_all(["th", "td"], recursive=False)]
    return []


def _has_english_key(text: str) -> bool:
    return any(k in text for k in ENGLISH_KEYS)


def detect_columns(headers: list[str], language_name: str) -> tuple[int, int]:
    """Return (english_idx, native_idx) guessed from lowercased header labels."""
    lang_key = language_name.strip().lower()

    en_idx = next((i for i, h in enumerate(headers) if _has_english_key(h)), 0)

    native_idx = -1
    if lang_key:
        native_idx = next((i for i, h in enumerate(headers) if lang_key in h), -1)
    if native_idx == -1:
        native_idx = next(
            (i for i, h in enumerate(headers)
             if i != en_idx and not _has_english_key(h) and not any(k in h for k in EXCLUDED_KEYS)),
            -1,
        )
    if native_idx == -1 or native_idx == en_idx:
        native_idx = 0 if en_idx != 0 else 1

    return en_idx, native_idx


def walk_rows(rows: list[list[str]], en_idx: int, native_idx: int, language_name: str,
              max_rows: int = MAX_ROWS_PER_WALK) -> tuple[list[VocabularyPair], float]:
    """
    Collect pairs from the given columns.

    Returns the pairs together with the share of candidate rows whose two cells
    were identical once case-folded, which is how a swapped column guess shows up.
    """
    lang_key = language_name.strip().lower()
    pairs = []
    candidates = 0
    identical = 0

    for cells in rows:
        if en_idx >= len(cells) or native_idx >= len(cells):
            continue
        english = cells[en_idx]
        native = cells[native_idx]
        if not english or not native:
            continue

        # header rows, including ones repeated inside the body
        if _has_english_key(english.lower()) or (lang_key and lang_key in native.lower()):
            continue

        candidates += 1
        if english.casefold() == native.casefold():
            identical += 1
            continue

        pairs.append(VocabularyPair(native=native, translation=english))
        if len(pairs) >= max_rows:
            break

    ratio = identical / candidates if candidates else 0.0
    return pairs, ratio


def clean_pairs(pairs: list[VocabularyPair], limit: int = MAX_TABLE_PAIRS) -> list[VocabularyPair]:
    seen = set()
    result = []
    for pair in pairs:
        key = (pair.native.strip().lower(), pair.translation.strip().lower())
        if key in seen:
            continue
        seen.add(key)
        if len(_NOISE_CHARS.findall(pair.native)) >= 2:
            continue
        result.append(pair)
    return result[:limit]


def table_rows(table) -> list[list[str]]:
    rows = []
    for tr in table.find_all("tr"):
        cells = tr.find_all(["td", "th"], recursive=False)
        # header-only rows carry labels, not vocabulary
        if not cells or all(c.name == "th" for c in cells):
            continue
        rows.append([cell_text(c) for c in cells])
    return rows


def extract_table_vocabulary(table, language_name: str,
                             swap_ratio: float = SWAP_IDENTICAL_RATIO,
                             max_table_pairs: int = MAX_TABLE_PAIRS,
                             max_rows: int = MAX_ROWS_PER_WALK) -> list[VocabularyPair]:
    headers = header_labels(table)
    en_idx, native_idx = detect_columns(headers, language_name)
    logging.debug(f"Table headers {headers} -> english column {en_idx}, native column {native_idx}")

    rows = table_rows(table)
    pairs, identical_ratio = walk_rows(rows, en_idx, native_idx, language_name, max_rows)

    if identical_ratio > swap_ratio:
        swapped, _ = walk_rows(rows, native_idx, en_idx, language_name, max_rows)
        logging.info(f"Identical ratio {identical_ratio:.2f} above {swap_ratio}, swap fallback produced {len(swapped)} pairs")
        if swapped:
            pairs = swapped

    return clean_pairs(pairs, max_table_pairs)


def extract_vocabulary(html: str, language_name: str,
                       swap_ratio: float = SWAP_IDENTICAL_RATIO,
                       early_return_pairs: int = EARLY_RETURN_PAIRS,
                       max_returned_pairs: int = MAX_RETURNED_PAIRS,
                       max_table_pairs: int = MAX_TABLE_PAIRS,
                       max_rows: int = MAX_ROWS_PER_WALK) -> list[VocabularyPair]:
    tables = find_wikitables(html)
    if not tables:
        logging.info("No wikitable found on page")
        return []

    best = []
    for index, table in enumerate(tables):
        vocab = extract_table_vocabulary(table, language_name, swap_ratio, max_table_pairs, max_rows)
        logging.info(f"Table {index} yielded {len(vocab)} pairs")

        if len(vocab) >= early_return_pairs:
            return vocab[:max_returned_pairs]
        if len(vocab) > len(best):
            best = vocab

    return best[:max_returned_pairs]
