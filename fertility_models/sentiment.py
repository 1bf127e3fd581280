"""
    This file scores response sentiment with the VADER lexicon (nltk).

    - score_texts: neg/neu/pos/compound per response + a 3-way label
    - sentiment_by_group: compound summary per intention group
    - word_sentiment_contributions: which lexicon words drive the scores
"""

import os
from collections import Counter
from dataclasses import dataclass
from typing import Optional

import pandas as pd
from nltk.sentiment.vader import SentimentIntensityAnalyzer

from fertility_models.preprocess import ensure_nltk_resources

SCORE_COLS = ["neg", "neu", "pos", "compound"]
LABELS = ["negative", "neutral", "positive"]


@dataclass
class SentimentConfig:
    lexicon_file: Optional[str] = None   # None -> bundled vader_lexicon
    pos_threshold: float = 0.05
    neg_threshold: float = -0.05


def make_analyzer(cfg=None):
    cfg = cfg or SentimentConfig()
    if cfg.lexicon_file is None:
        ensure_nltk_resources(["vader_lexicon"])
        return SentimentIntensityAnalyzer()
    # nltk resolves absolute paths as file:// resources
    return SentimentIntensityAnalyzer(lexicon_file=os.path.abspath(str(cfg.lexicon_file)))


def label_compound(score, cfg=None):
    cfg = cfg or SentimentConfig()
    if score >= cfg.pos_threshold:
        return "positive"
    if score <= cfg.neg_threshold:
        return "negative"
    return "neutral"


def score_texts(texts, analyzer, cfg=None):
    cfg = cfg or SentimentConfig()
    rows = []
    for t in texts:
        if not isinstance(t, str) or not t.strip():
            rows.append({k: 0.0 for k in SCORE_COLS})
            continue
        s = analyzer.polarity_scores(t)
        rows.append({k: float(s[k]) for k in SCORE_COLS})
    df = pd.DataFrame(rows, columns=SCORE_COLS)
    df["sentiment"] = [label_compound(c, cfg) for c in df["compound"]]
    return df


def sentiment_by_group(scores, groups):
    """
    Summarise compound scores per group.

    Columns: group, n, mean_compound, median_compound and one share_<label>
    column per sentiment label. Groups are sorted.
    """
    groups = list(groups)
    if len(groups) != len(scores):
        raise ValueError(f"length mismatch: groups={len(groups)} scores={len(scores)}")
    df = scores[["compound", "sentiment"]].copy()
    df["group"] = groups

    rows = []
    for g, part in sorted(df.groupby("group"), key=lambda kv: str(kv[0])):
        row = {
            "group": g,
            "n": int(len(part)),
            "mean_compound": float(part["compound"].mean()),
            "median_compound": float(part["compound"].median()),
        }
        shares = part["sentiment"].value_counts(normalize=True)
        for lab in LABELS:
            row[f"share_{lab}"] = float(shares.get(lab, 0.0))
        rows.append(row)
    return pd.DataFrame(rows, columns=["group", "n", "mean_compound", "median_compound"]
                        + [f"share_{lab}" for lab in LABELS])


def word_sentiment_contributions(token_lists, analyzer, top=None):
    cnt = Counter()
    for toks in token_lists:
        cnt.update(toks)
    lex = analyzer.lexicon

    rows = []
    for w, c in cnt.items():
        if w in lex:
            v = float(lex[w])
            rows.append((w, v, int(c), v * c, "positive" if v >= 0 else "negative"))
    df = pd.DataFrame(rows, columns=["token", "valence", "count", "contribution", "direction"])
    if df.empty:
        return df
    df = (df.assign(_abs=df["contribution"].abs())
            .sort_values(["_abs", "token"], ascending=[False, True])
            .drop(columns="_abs")
            .reset_index(drop=True))
    if top is not None:
        df = df.head(top)
    return df
