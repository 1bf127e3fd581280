"""
    This file builds the document-term matrix of the cleaned responses and
    fits an LDA topic model on it.
    Usage: python -m fertility_scripts.fit_topics [--num-topics 4] [--sweep 2 3 4 5 6]
"""

import os
import sys
import argparse
from dataclasses import asdict
from pathlib import Path

import pandas as pd

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from fertility_scripts.config import (
    CLEANED_RESPONSES, STOPWORD_FILE, TOPICS_OUTPUT, PIC_DIR, ID_COL, CLEAN_COL, LABEL_COL, SEED,
)
from fertility_scripts.common import load_table, write_json, bool_flag

from fertility_models.preprocess import load_stopwords, tokenize_responses
from fertility_models.dtm import DTMConfig, build_dtm, top_terms, save_artifacts
from fertility_models.topics import TopicConfig, TopicModel, sweep_num_topics
from fertility_models import plots

CFG = TopicConfig(num_topics=4, passes=20, iterations=400, alpha="auto", eta="auto",
                  no_below=2, no_above=0.9, keep_n=5000, coherence="u_mass", seed=SEED)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Document-term matrix + LDA topic model.")
    p.add_argument("--input", default=str(CLEANED_RESPONSES))
    p.add_argument("--stopwords", default=str(STOPWORD_FILE))
    bool_flag(p, "nltk-stopwords", True)
    p.add_argument("--tokenizer", choices=["word", "regexp"], default="word")
    p.add_argument("--min-len", type=int, default=2)
    p.add_argument("--weighting", choices=["count", "tfidf"], default="count")

    p.add_argument("--num-topics", type=int, default=CFG.num_topics)
    p.add_argument("--passes", type=int, default=CFG.passes)
    p.add_argument("--iterations", type=int, default=CFG.iterations)
    p.add_argument("--no-below", type=int, default=CFG.no_below)
    p.add_argument("--no-above", type=float, default=CFG.no_above)
    p.add_argument("--coherence", choices=["u_mass", "c_v", "c_npmi"], default=CFG.coherence)
    p.add_argument("--seed", type=int, default=CFG.seed)
    p.add_argument("--sweep", type=int, nargs="*", default=None,
                   help="also fit these numbers of topics and report coherence")
    p.add_argument("--top", type=int, default=10)

    p.add_argument("--output", default=TOPICS_OUTPUT)
    p.add_argument("--pic-dir", default=PIC_DIR)
    p.add_argument("--id-col", default=ID_COL)
    p.add_argument("--clean-col", default=CLEAN_COL)
    p.add_argument("--label-col", default=LABEL_COL)
    return p.parse_args(argv)


def _apply_overrides(cfg, args):
    cfg.num_topics = args.num_topics
    cfg.passes = args.passes
    cfg.iterations = args.iterations
    cfg.no_below = args.no_below
    cfg.no_above = args.no_above
    cfg.coherence = args.coherence
    cfg.seed = args.seed
    return cfg


def main(argv=None):
    args = parse_args(argv)
    cfg = _apply_overrides(TopicConfig(**asdict(CFG)), args)
    out = Path(args.output); out.mkdir(parents=True, exist_ok=True)
    pics = Path(args.pic_dir); pics.mkdir(parents=True, exist_ok=True)

    df = load_table(args.input, [args.id_col, args.clean_col])
    sw_path = args.stopwords if os.path.exists(args.stopwords) else None
    stop = load_stopwords(sw_path, include_nltk=args.nltk_stopwords)
    tokens = tokenize_responses(df[args.clean_col].fillna(""), stopwords=stop,
                                method=args.tokenizer, min_len=args.min_len)

    # document-term matrix
    dtm, vec = build_dtm(tokens, doc_ids=df[args.id_col].tolist(), cfg=DTMConfig(weighting=args.weighting))
    print(f"[topics] document-term matrix: {dtm.shape[0]} responses x {dtm.shape[1]} terms ({args.weighting})")
    save_artifacts(out / "dtm", vec, dtm)
    top_terms(dtm, top=50).to_csv(out / "dtm_top_terms.csv", index=False)

    if args.sweep:
        scores = sweep_num_topics(tokens, args.sweep, cfg)
        scores.to_csv(out / "k_sweep.csv", index=False)
        print("\n--- Number of topics ---")
        print(scores.to_string(index=False))

    # LDA
    tm = TopicModel(cfg).fit(tokens)
    coh = tm.coherence(tokens)
    perp = tm.log_perplexity()
    print(f"\n--- LDA (k={cfg.num_topics}) ---")
    print(f"Vocabulary     : {len(tm.dictionary)} terms after filtering")
    print(f"Coherence      : {coh:.4f} ({cfg.coherence})")
    print(f"Log perplexity : {perp:.2f}")

    terms = tm.top_terms(n=args.top)
    terms.to_csv(out / "topic_terms.csv", index=False)
    for k, part in terms.groupby("topic"):
        print(f"Topic {k}: " + ", ".join(part.sort_values("rank")["term"]))
    plots.plot_topic_terms(terms, pics / "topic_terms.png", n=args.top)

    gamma = tm.doc_topics()
    doc_topics = pd.DataFrame(gamma, columns=[f"topic_{k}" for k in range(gamma.shape[1])])
    doc_topics.insert(0, args.id_col, df[args.id_col].values)
    doc_topics["dominant_topic"] = gamma.argmax(axis=1)
    if args.label_col in df.columns:
        doc_topics[args.label_col] = df[args.label_col].values
        plots.plot_topics_by_group(gamma, df[args.label_col].astype(str), pics / "topics_by_intention.png")
    doc_topics.to_csv(out / "doc_topics.csv", index=False)

    tm.save(out / "lda")
    meta = {"data": args.input, "weighting": args.weighting, "dtm_shape": list(dtm.shape),
            "topic_config": asdict(cfg), "coherence": coh, "log_perplexity": perp,
            "sweep": args.sweep}
    write_json(meta, out / "meta.json")
    print(f"\nSaved topic model and tables to: {out}")
    return meta


if __name__ == "__main__":
    main()
