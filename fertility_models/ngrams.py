"""
    This file builds n-gram frequency tables from tokenized responses.
    N-grams are formed inside a single response only.
"""

from collections import Counter

import pandas as pd
from nltk.util import ngrams as _nltk_ngrams


def make_ngrams(tokens, n):
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    return [" ".join(g) for g in _nltk_ngrams(tokens, n)]


def _ranked(counter, top):
    ranked = sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))
    if top is not None:
        ranked = ranked[:top]
    return ranked


def ngram_frequencies(token_lists, n=2, top=None):
    cnt = Counter()
    for toks in token_lists:
        cnt.update(make_ngrams(toks, n))
    return pd.DataFrame(_ranked(cnt, top), columns=["ngram", "count"])


def ngram_frequencies_by_group(token_lists, groups, n=2, top=None):
    groups = list(groups)
    if len(groups) != len(token_lists):
        raise ValueError(f"length mismatch: groups={len(groups)} token_lists={len(token_lists)}")
    per_group = {}
    for g, toks in zip(groups, token_lists):
        per_group.setdefault(g, Counter()).update(make_ngrams(toks, n))

    rows = []
    for g in sorted(per_group, key=str):
        rows.extend((g, gram, c) for gram, c in _ranked(per_group[g], top))
    return pd.DataFrame(rows, columns=["group", "ngram", "count"])
