"""
    This file fits LDA topic models on tokenized responses with gensim.

    - builds a gensim Dictionary (with extreme-frequency filtering) and a
      bag-of-words corpus
    - fits LdaModel and exposes per-topic term weights (beta) and
      per-document topic proportions (gamma)
    - coherence / perplexity helpers and a sweep over the number of topics
"""

import json
import os
from dataclasses import asdict, dataclass

import numpy as np
import pandas as pd
from gensim.corpora import Dictionary, MmCorpus
from gensim.models import CoherenceModel, LdaModel


@dataclass
class TopicConfig:
    num_topics: int = 4
    passes: int = 20
    iterations: int = 400
    alpha: str = "auto"
    eta: str = "auto"
    no_below: int = 2           # drop terms in fewer than no_below responses
    no_above: float = 0.9       # drop terms in more than this share of responses
    keep_n: int = 5000
    coherence: str = "u_mass"   # "u_mass" | "c_v" | "c_npmi"
    seed: int = 42


class TopicModel:
    """
    LDA over survey responses.
    """

    def __init__(self, config=None):
        self.cfg = config or TopicConfig()
        self.dictionary = None
        self.corpus = None
        self.lda = None

    # ----------------------- public API -----------------------
    def fit(self, token_lists):
        token_lists = [list(t) for t in token_lists]
        if not any(token_lists):
            raise ValueError("cannot fit LDA on an empty corpus (every response has no tokens)")

        d = Dictionary(token_lists)
        d.filter_extremes(no_below=self.cfg.no_below, no_above=self.cfg.no_above,
                          keep_n=self.cfg.keep_n)
        # tiny corpora can lose every term to filtering; keep the full vocabulary then
        if len(d) == 0:
            print("[topics] frequency filter removed every term; using unfiltered vocabulary")
            d = Dictionary(token_lists)
        self.dictionary = d
        self.corpus = [d.doc2bow(t) for t in token_lists]

        self.lda = LdaModel(
            corpus=self.corpus,
            id2word=self.dictionary,
            num_topics=self.cfg.num_topics,
            passes=self.cfg.passes,
            iterations=self.cfg.iterations,
            alpha=self.cfg.alpha,
            eta=self.cfg.eta,
            random_state=self.cfg.seed,
            eval_every=None,
        )
        return self

    def top_terms(self, n=10):
        self._check_fitted()
        rows = []
        for k in range(self.lda.num_topics):
            for rank, (term, beta) in enumerate(self.lda.show_topic(k, topn=n), start=1):
                rows.append((k, rank, term, float(beta)))
        return pd.DataFrame(rows, columns=["topic", "rank", "term", "beta"])

    def doc_topics(self, token_lists=None):
        self._check_fitted()
        corpus = self.corpus if token_lists is None else [self.dictionary.doc2bow(list(t)) for t in token_lists]
        k = self.lda.num_topics
        gamma = np.zeros((len(corpus), k), dtype=np.float64)
        for i, bow in enumerate(corpus):
            for topic, p in self.lda.get_document_topics(bow, minimum_probability=0.0):
                gamma[i, topic] = p
        # renormalise away float drift
        sums = gamma.sum(axis=1, keepdims=True)
        sums[sums == 0] = 1.0
        return gamma / sums

    def dominant_topics(self, token_lists=None):
        gamma = self.doc_topics(token_lists)
        return pd.DataFrame({
            "dominant_topic": gamma.argmax(axis=1).astype(int),
            "topic_share": gamma.max(axis=1),
        })

    def coherence(self, token_lists=None):
        self._check_fitted()
        if self.cfg.coherence == "u_mass":
            corpus = self.corpus
            if not corpus and token_lists is not None:
                corpus = [self.dictionary.doc2bow(list(t)) for t in token_lists]
            if not corpus:
                raise ValueError("u_mass coherence needs the training corpus or the tokenized texts")
            cm = CoherenceModel(model=self.lda, corpus=corpus, dictionary=self.dictionary,
                                coherence="u_mass")
        else:
            if token_lists is None:
                raise ValueError(f"{self.cfg.coherence} coherence needs the tokenized texts")
            cm = CoherenceModel(model=self.lda, texts=[list(t) for t in token_lists],
                                dictionary=self.dictionary, coherence=self.cfg.coherence)
        return float(cm.get_coherence())

    def log_perplexity(self):
        self._check_fitted()
        if not self.corpus:
            raise ValueError("log-perplexity needs the training corpus")
        return float(self.lda.log_perplexity(self.corpus))

    def save(self, dirpath):
        self._check_fitted()
        os.makedirs(dirpath, exist_ok=True)
        self.lda.save(os.path.join(dirpath, "lda.model"))
        self.dictionary.save(os.path.join(dirpath, "dictionary.gensim"))
        MmCorpus.serialize(os.path.join(dirpath, "corpus.mm"), self.corpus)
        with open(os.path.join(dirpath, "topic_config.json"), "w", encoding="utf-8") as f:
            json.dump(asdict(self.cfg), f, indent=2)

    @classmethod
    def load(cls, dirpath):
        with open(os.path.join(dirpath, "topic_config.json"), "r", encoding="utf-8") as f:
            cfg = TopicConfig(**json.load(f))
        obj = cls(cfg)
        obj.lda = LdaModel.load(os.path.join(dirpath, "lda.model"))
        obj.dictionary = Dictionary.load(os.path.join(dirpath, "dictionary.gensim"))
        corpus_path = os.path.join(dirpath, "corpus.mm")
        # older saves carry no corpus; doc_topics(token_lists) still works for them
        obj.corpus = list(MmCorpus(corpus_path)) if os.path.exists(corpus_path) else []
        return obj

    # ----------------------- internals -----------------------
    def _check_fitted(self):
        if self.lda is None:
            raise ValueError("topic model is not fitted; call fit() first")


def sweep_num_topics(token_lists, ks, cfg=None):
    """Fit one model per k and report coherence and log-perplexity."""
    base = cfg or TopicConfig()
    rows = []
    for k in ks:
        kcfg = TopicConfig(**{**asdict(base), "num_topics": int(k)})
        tm = TopicModel(kcfg).fit(token_lists)
        coh = tm.coherence(token_lists)
        perp = tm.log_perplexity()
        print(f"[topics] k={k:>2}  {kcfg.coherence}={coh:.4f}  log_perplexity={perp:.2f}")
        rows.append({"k": int(k), "coherence": coh, "log_perplexity": perp})
    return pd.DataFrame(rows, columns=["k", "coherence", "log_perplexity"])
