"""
    This file defines text cleaning, tokenization and stop-word utilities
    for the survey responses.

Exposes:
- normalize_text(text)
- clean_responses(df, text_col, id_col) -> (clean_df, meta)
- tokenize(text, method="word")
- load_stopwords(path, include_nltk=False, extra=())
- remove_stopwords(tokens, stopwords, min_len=1)
- tokenize_responses(texts, stopwords=None)
- tidy_tokens(ids, token_lists)
- word_frequencies(token_lists, top=None)
- word_frequencies_by_group(token_lists, groups, top=None)
"""

import html
import re
import unicodedata
from collections import Counter
from pathlib import Path

import pandas as pd

import nltk
from nltk.tokenize import RegexpTokenizer, word_tokenize

_RESOURCE_PATHS = {
    "punkt": "tokenizers/punkt",
    "punkt_tab": "tokenizers/punkt_tab",
    "stopwords": "corpora/stopwords",
    "vader_lexicon": "sentiment/vader_lexicon.zip",
}

URL_RE = re.compile(r"(https?://\S+|www\.\S+)")
EMAIL_RE = re.compile(r"\b[\w\.-]+@[\w\.-]+\.\w+\b")
QUOTES = str.maketrans({"‘": "'", "’": "'", "“": '"', "”": '"'})
NON_WORD_RE = re.compile(r"[^a-z'\s]+")
LOOSE_APOS_RE = re.compile(r"(^|\s)'+|'+(\s|$)")
ALPHA_RE = re.compile(r"^[a-z]+(?:'[a-z]+)*$")

_REGEXP_TOKENIZER = RegexpTokenizer(r"[A-Za-z]+(?:'[A-Za-z]+)*|[^\sA-Za-z]+")


# download nltk data only when it is missing
def ensure_nltk_resources(names):
    for name in names:
        try:
            nltk.data.find(_RESOURCE_PATHS.get(name, name))
        except LookupError:
            nltk.download(name, quiet=True)


def normalize_text(text):
    if not isinstance(text, str):
        return ""
    s = html.unescape(text)
    s = unicodedata.normalize("NFKC", s).translate(QUOTES)
    s = s.lower()
    s = URL_RE.sub(" ", s)
    s = EMAIL_RE.sub(" ", s)
    s = NON_WORD_RE.sub(" ", s)
    s = LOOSE_APOS_RE.sub(" ", s)
    return re.sub(r"\s+", " ", s).strip()


def clean_responses(df, text_col="response", id_col="id"):
    """
    Add a `clean_text` column and drop unusable rows.

    Rows whose text is missing or empty after cleaning are dropped, as are
    repeated identifiers (the first occurrence is kept). Covariates and the
    label column are carried through untouched.

    Returns (clean_df, meta) where meta counts what was removed.
    """
    missing = {text_col, id_col} - set(df.columns)
    if missing:
        raise ValueError(f"responses table is missing columns: {sorted(missing)}")

    n_raw = len(df)
    out = df.copy()
    out["clean_text"] = out[text_col].map(normalize_text)
    empty = out["clean_text"].str.len() == 0
    out = out.loc[~empty]
    dupes = out[id_col].duplicated(keep="first")
    out = out.loc[~dupes].reset_index(drop=True)

    meta = {
        "n_raw": int(n_raw),
        "n_clean": int(len(out)),
        "dropped_rows": int(n_raw - len(out)),
        "dropped_empty": int(empty.sum()),
        "dropped_duplicate_ids": int(dupes.sum()),
    }
    return out, meta


# split one response into tokens
def tokenize(text, method="word", lowercase=True, alpha_only=True):
    if not isinstance(text, str) or not text.strip():
        return []
    if method == "word":
        ensure_nltk_resources(["punkt", "punkt_tab"])
        toks = word_tokenize(text)
    elif method == "regexp":
        toks = _REGEXP_TOKENIZER.tokenize(text)
    else:
        raise ValueError(f"unknown tokenizer method: {method!r} (use 'word' or 'regexp')")
    if lowercase:
        toks = [t.lower() for t in toks]
    if alpha_only:
        toks = [t for t in toks if ALPHA_RE.match(t.lower())]
    return toks


def load_stopwords(path=None, include_nltk=False, extra=()):
    words = set()
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"stopword list not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                w = line.strip().lower()
                if w and not w.startswith("#"):
                    words.add(w)
    if include_nltk:
        ensure_nltk_resources(["stopwords"])
        from nltk.corpus import stopwords
        words.update(stopwords.words("english"))
    words.update(w.lower() for w in extra)
    return words


def remove_stopwords(tokens, stopwords, min_len=1):
    return [t for t in tokens if t not in stopwords and len(t) >= min_len]


def tokenize_responses(texts, stopwords=None, method="word", min_len=1):
    out = []
    for text in texts:
        toks = tokenize(text, method=method)
        if stopwords is not None or min_len > 1:
            toks = remove_stopwords(toks, stopwords or set(), min_len=min_len)
        out.append(toks)
    return out


# one row per (response, token), in the order tokens appear
def tidy_tokens(ids, token_lists):
    ids = list(ids)
    if len(ids) != len(token_lists):
        raise ValueError(f"length mismatch: ids={len(ids)} token_lists={len(token_lists)}")
    rows = [(i, t) for i, toks in zip(ids, token_lists) for t in toks]
    return pd.DataFrame(rows, columns=["id", "token"])


def _frequency_frame(counter, top):
    total = sum(counter.values())
    ranked = sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))
    if top is not None:
        ranked = ranked[:top]
    df = pd.DataFrame(ranked, columns=["token", "count"])
    df["proportion"] = df["count"] / total if total else 0.0
    return df


def word_frequencies(token_lists, top=None):
    cnt = Counter()
    for toks in token_lists:
        cnt.update(toks)
    return _frequency_frame(cnt, top)


def word_frequencies_by_group(token_lists, groups, top=None):
    groups = list(groups)
    if len(groups) != len(token_lists):
        raise ValueError(f"length mismatch: groups={len(groups)} token_lists={len(token_lists)}")
    per_group = {}
    for g, toks in zip(groups, token_lists):
        per_group.setdefault(g, Counter()).update(toks)

    frames = []
    for g in sorted(per_group, key=str):
        f = _frequency_frame(per_group[g], top)
        f.insert(0, "group", g)
        frames.append(f)
    if not frames:
        return pd.DataFrame(columns=["group", "token", "count", "proportion"])
    return pd.concat(frames, ignore_index=True)
