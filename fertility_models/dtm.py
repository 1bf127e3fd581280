"""
    This file defines document-term matrix utilities on top of scikit-learn.

Exposes:
- DTMConfig
- build_dtm(token_lists, doc_ids=None, cfg=None) -> (DocumentTermMatrix, vectorizer)
- top_terms(dtm, top=20)
- distinctive_terms(token_lists, groups, top=10) -> per-group TF-IDF ranking
- save_artifacts(out_dir, vectorizer, dtm)
- load_artifacts(out_dir) -> (vectorizer, dtm)
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import joblib
import numpy as np
import pandas as pd
from scipy import sparse
from sklearn.feature_extraction.text import CountVectorizer, TfidfVectorizer


# responses arrive already tokenized; the vectorizer must not re-split them
def _identity(tokens):
    return tokens


@dataclass
class DTMConfig:
    weighting: str = "count"          # "count" | "tfidf"
    min_df: float = 1
    max_df: float = 1.0
    max_features: Optional[int] = None
    ngram_range: Tuple[int, int] = (1, 1)


@dataclass
class DocumentTermMatrix:
    matrix: sparse.csr_matrix
    terms: List[str]
    doc_ids: List = field(default_factory=list)

    @property
    def shape(self):
        return self.matrix.shape

    def to_frame(self):
        return pd.DataFrame(self.matrix.toarray(), index=self.doc_ids, columns=self.terms)

    def term_totals(self):
        totals = np.asarray(self.matrix.sum(axis=0)).ravel()
        return pd.Series(totals, index=self.terms)


def _make_vectorizer(cfg):
    kw = dict(
        tokenizer=_identity, preprocessor=_identity, lowercase=False, token_pattern=None,
        min_df=cfg.min_df, max_df=cfg.max_df, max_features=cfg.max_features,
        ngram_range=tuple(cfg.ngram_range),
    )
    if cfg.weighting == "count":
        return CountVectorizer(**kw)
    if cfg.weighting == "tfidf":
        return TfidfVectorizer(**kw)
    raise ValueError(f"unknown weighting: {cfg.weighting!r} (use 'count' or 'tfidf')")


def build_dtm(token_lists, doc_ids=None, cfg=None):
    cfg = cfg or DTMConfig()
    vec = _make_vectorizer(cfg)
    token_lists = [list(t) for t in token_lists]
    if doc_ids is None:
        doc_ids = list(range(len(token_lists)))
    doc_ids = list(doc_ids)
    if len(doc_ids) != len(token_lists):
        raise ValueError(f"length mismatch: doc_ids={len(doc_ids)} token_lists={len(token_lists)}")

    X = vec.fit_transform(token_lists).tocsr()
    dtm = DocumentTermMatrix(matrix=X, terms=vec.get_feature_names_out().tolist(), doc_ids=doc_ids)
    return dtm, vec


def top_terms(dtm, top=20):
    totals = dtm.term_totals()
    df = pd.DataFrame({"term": totals.index, "total": totals.values})
    df = df.sort_values(["total", "term"], ascending=[False, True]).reset_index(drop=True)
    return df.head(top)


# treat each group as one document so TF-IDF picks words that set the group apart
def distinctive_terms(token_lists, groups, top=10):
    groups = list(groups)
    if len(groups) != len(token_lists):
        raise ValueError(f"length mismatch: groups={len(groups)} token_lists={len(token_lists)}")
    names = sorted(set(groups), key=str)
    merged = {g: [] for g in names}
    for g, toks in zip(groups, token_lists):
        merged[g].extend(toks)

    vec = TfidfVectorizer(tokenizer=_identity, preprocessor=_identity, lowercase=False,
                          token_pattern=None, smooth_idf=False)
    X = vec.fit_transform([merged[g] for g in names]).toarray()
    terms = vec.get_feature_names_out()

    rows = []
    for gi, g in enumerate(names):
        order = sorted(np.flatnonzero(X[gi]), key=lambda j: (-X[gi, j], terms[j]))
        for rank, j in enumerate(order[:top], start=1):
            rows.append((g, rank, terms[j], float(X[gi, j])))
    return pd.DataFrame(rows, columns=["group", "rank", "term", "tfidf"])


def save_artifacts(out_dir, vec, dtm):
    os.makedirs(out_dir, exist_ok=True)
    joblib.dump(vec, os.path.join(out_dir, "vectorizer.joblib"))
    joblib.dump(dtm, os.path.join(out_dir, "dtm.joblib"))


def load_artifacts(out_dir):
    vec = joblib.load(os.path.join(out_dir, "vectorizer.joblib"))
    dtm = joblib.load(os.path.join(out_dir, "dtm.joblib"))
    return vec, dtm
