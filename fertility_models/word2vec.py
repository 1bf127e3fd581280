"""
    This file trains gensim Word2Vec vectors on the tokenized responses.

    - train_word2vec: skip-gram / CBOW vectors for the survey vocabulary
    - similar_words: nearest neighbours of a word, for exploration
    - embedding_matrix: vectors aligned to the classifier vocabulary so they
      can initialise its embedding layer
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from gensim.models import Word2Vec

from fertility_models.sequences import PAD_ID


# word2vec configuration
@dataclass
class W2VConfig:
    vector_size: int = 50
    window: int = 5
    min_count: int = 2
    sg: int = 1                 # 0=CBOW, 1=skip-gram
    negative: int = 5
    epochs: int = 50
    workers: int = 1            # >1 makes training non-deterministic
    seed: int = 42


def train_word2vec(token_lists, cfg=None):
    cfg = cfg or W2VConfig()
    sents = [list(t) for t in token_lists if t]
    if not sents:
        raise ValueError("cannot train Word2Vec on an empty corpus")
    w2v = Word2Vec(
        sentences=sents,
        vector_size=cfg.vector_size,
        window=cfg.window,
        min_count=cfg.min_count,
        sg=cfg.sg,
        negative=cfg.negative,
        epochs=cfg.epochs,
        workers=cfg.workers,
        seed=cfg.seed,
    )
    return w2v.wv


def similar_words(kv, word, topn=10):
    if word not in kv:
        return pd.DataFrame(columns=["word", "similarity"])
    return pd.DataFrame(kv.most_similar(word, topn=topn), columns=["word", "similarity"])


def embedding_matrix(kv, stoi, dim=None, seed=42):
    """
    Rows follow the vocabulary indices in `stoi`. The padding row is zero;
    words without a trained vector get small random values.
    """
    dim = dim or kv.vector_size
    if dim != kv.vector_size:
        raise ValueError(f"dim {dim} does not match word vectors of size {kv.vector_size}")
    rng = np.random.RandomState(seed)
    mat = (rng.randn(len(stoi), dim) * 0.1).astype(np.float32)
    hits = 0
    for w, i in stoi.items():
        if w in kv:
            mat[i] = kv[w]
            hits += 1
    mat[PAD_ID] = 0.0
    print(f"[word2vec] initialised {hits}/{len(stoi)} vocabulary rows from trained vectors")
    return mat
