"""
    This file defines engineered per-response features and the feature table
    written next to the cleaned responses.
"""

from collections import Counter

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin

from fertility_models.preprocess import tokenize

FEATURE_NAMES = [
    "num_chars",
    "num_tokens",
    "num_types",
    "avg_token_len",
    "stopword_ratio",
    "ttr",
    "hapax_ratio",
]


# safe division in case the denominator is 0
def _safe_div(a, b):
    return float(a) / float(b) if b else 0.0


class ResponseFeatureVectorizer(BaseEstimator, TransformerMixin):
    """
    handcrafted length / lexical features of a response:
      - character, token and type counts, average token length
      - share of stop words
      - type-token ratio and hapax ratio
    """
    def __init__(self, stopwords=None, method="word"):
        self.stopwords = stopwords
        self.method = method

    def fit(self, texts, y=None):
        self.feature_names_ = list(FEATURE_NAMES)
        return self

    def transform(self, texts):
        feats = [self._featurize_one(t) for t in texts]
        if not feats:
            return np.zeros((0, len(FEATURE_NAMES)), dtype=np.float32)
        return np.vstack(feats).astype(np.float32)

    def _featurize_one(self, text):
        text = text if isinstance(text, str) else ""
        toks = tokenize(text, method=self.method)
        sw = self.stopwords or set()
        n = len(toks)
        freqs = Counter(toks)
        v = len(freqs)
        v1 = sum(1 for c in freqs.values() if c == 1)
        return np.array([
            float(len(text)),
            float(n),
            float(v),
            _safe_div(sum(len(t) for t in toks), n),
            _safe_div(sum(1 for t in toks if t in sw), n),
            _safe_div(v, n),
            _safe_div(v1, v),
        ], dtype=np.float32)


def build_feature_table(df, id_col="id", label_col="intention", covariates=(),
                        text_col="clean_text", stopwords=None, method="word",
                        sentiment=None, topics=None):
    """
    One row per response: identifier, covariates, label, text features and,
    when given, sentiment scores and topic proportions.

    `sentiment` is the frame returned by sentiment.score_texts and `topics`
    an (n_docs x k) array of topic proportions; both must follow the row
    order of `df`.
    """
    n = len(df)
    keep = [id_col] + [c for c in covariates if c in df.columns and c not in (id_col, label_col)]
    if label_col in df.columns:
        keep.append(label_col)
    out = df[keep].reset_index(drop=True).copy()

    vec = ResponseFeatureVectorizer(stopwords=stopwords, method=method).fit(df[text_col])
    X = vec.transform(df[text_col].tolist())
    out = pd.concat([out, pd.DataFrame(X, columns=vec.feature_names_)], axis=1)

    if sentiment is not None:
        if len(sentiment) != n:
            raise ValueError(f"row mismatch: responses={n} sentiment={len(sentiment)}")
        out = pd.concat([out, sentiment.reset_index(drop=True)], axis=1)

    if topics is not None:
        topics = np.asarray(topics)
        if topics.ndim != 2 or topics.shape[0] != n:
            raise ValueError(f"row mismatch: responses={n} topics={topics.shape}")
        tcols = [f"topic_{k}" for k in range(topics.shape[1])]
        out = pd.concat([out, pd.DataFrame(topics, columns=tcols)], axis=1)
        out["dominant_topic"] = topics.argmax(axis=1).astype(int) if topics.shape[1] else -1
    return out
