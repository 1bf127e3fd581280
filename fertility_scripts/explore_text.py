"""
    This file runs the exploratory text analysis of the cleaned responses:
    tokens, stop words, word and n-gram frequencies, sentiment and the words
    that set each intention group apart.
    Usage: python -m fertility_scripts.explore_text
"""

import os
import sys
import argparse
from pathlib import Path

import numpy as np

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from fertility_scripts.config import (
    CLEANED_RESPONSES, STOPWORD_FILE, EXPLORE_OUTPUT, PIC_DIR,
    ID_COL, TEXT_COL, CLEAN_COL, LABEL_COL,
)
from fertility_scripts.common import load_table, write_json, bool_flag

from fertility_models.preprocess import (
    load_stopwords, tokenize_responses, tidy_tokens,
    word_frequencies, word_frequencies_by_group,
)
from fertility_models.ngrams import ngram_frequencies, ngram_frequencies_by_group
from fertility_models.sentiment import (
    SentimentConfig, make_analyzer, score_texts, sentiment_by_group, word_sentiment_contributions,
)
from fertility_models.dtm import distinctive_terms
from fertility_models import plots


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Exploratory text analytics of survey responses.")
    p.add_argument("--input", default=str(CLEANED_RESPONSES))
    p.add_argument("--stopwords", default=str(STOPWORD_FILE))
    bool_flag(p, "nltk-stopwords", True)
    p.add_argument("--tokenizer", choices=["word", "regexp"], default="word")
    p.add_argument("--min-len", type=int, default=2)
    p.add_argument("--top", type=int, default=20)
    p.add_argument("--lexicon", default=None, help="custom VADER lexicon file")
    p.add_argument("--output", default=EXPLORE_OUTPUT)
    p.add_argument("--pic-dir", default=PIC_DIR)
    p.add_argument("--id-col", default=ID_COL)
    p.add_argument("--text-col", default=TEXT_COL)
    p.add_argument("--clean-col", default=CLEAN_COL)
    p.add_argument("--label-col", default=LABEL_COL)
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    out = Path(args.output); out.mkdir(parents=True, exist_ok=True)
    pics = Path(args.pic_dir); pics.mkdir(parents=True, exist_ok=True)

    df = load_table(args.input, [args.id_col, args.clean_col])
    df[args.clean_col] = df[args.clean_col].fillna("")
    has_label = args.label_col in df.columns
    groups = df[args.label_col].astype(str).tolist() if has_label else None
    print(f"[explore] {len(df)} responses loaded from {args.input}")

    # length summary
    n_words = df[args.clean_col].str.split().str.len()
    print("[explore] words per response:")
    print(n_words.describe().to_string())

    # tokens before / after stop-word filtering
    sw_path = args.stopwords if os.path.exists(args.stopwords) else None
    if sw_path is None:
        print(f"[explore] stopword list {args.stopwords} not found; using nltk list only")
    stop = load_stopwords(sw_path, include_nltk=args.nltk_stopwords)
    raw_tokens = tokenize_responses(df[args.clean_col], method=args.tokenizer)
    tokens = tokenize_responses(df[args.clean_col], stopwords=stop, method=args.tokenizer, min_len=args.min_len)
    n_raw, n_kept = sum(map(len, raw_tokens)), sum(map(len, tokens))
    print(f"[explore] {n_raw} tokens, {n_kept} after removing {len(stop)} stop words")

    tidy_tokens(df[args.id_col], tokens).to_csv(out / "tokens.csv", index=False)

    # word frequencies
    freqs = word_frequencies(tokens)
    freqs.to_csv(out / "word_frequencies.csv", index=False)
    print("\n--- Top words ---")
    print(freqs.head(args.top).to_string(index=False))
    plots.plot_frequencies(freqs, "token", "count", "Most frequent words", pics / "top_words.png", top=args.top)

    # n-grams never cross responses; built from the filtered tokens
    for n, name in ((2, "bigrams"), (3, "trigrams")):
        grams = ngram_frequencies(tokens, n=n)
        grams.to_csv(out / f"{name}.csv", index=False)
        print(f"\n--- Top {name} ---")
        print(grams.head(args.top).to_string(index=False) if not grams.empty else "(none)")
        plots.plot_frequencies(grams, "ngram", "count", f"Most frequent {name}", pics / f"top_{name}.png", top=args.top)

    # sentiment on the raw wording when present (VADER uses case and punctuation)
    sent_col = args.text_col if args.text_col in df.columns else args.clean_col
    analyzer = make_analyzer(SentimentConfig(lexicon_file=args.lexicon))
    scores = score_texts(df[sent_col].fillna("").tolist(), analyzer)
    scores.insert(0, args.id_col, df[args.id_col].values)
    scores.to_csv(out / "sentiment.csv", index=False)
    plots.plot_sentiment_hist(scores, pics / "sentiment_hist.png")
    print("\n--- Sentiment ---")
    print(scores["sentiment"].value_counts().to_string())
    for q in (5, 25, 50, 75, 95):
        print(f"{q:>2}th : {np.percentile(scores['compound'], q): .3f}")

    contrib = word_sentiment_contributions(tokens, analyzer, top=args.top)
    contrib.to_csv(out / "sentiment_words.csv", index=False)

    summary = {"n_responses": len(df), "n_tokens": n_raw, "n_tokens_filtered": n_kept,
               "n_stopwords": len(stop), "vocabulary": int(len(freqs)),
               "sentiment_counts": scores["sentiment"].value_counts().to_dict()}

    if has_label:
        group_freqs = word_frequencies_by_group(tokens, groups, top=args.top)
        group_freqs.to_csv(out / "word_frequencies_by_intention.csv", index=False)
        plots.plot_group_frequencies(group_freqs, "token", "count", "Top words by intention",
                                     pics / "top_words_by_intention.png")
        ngram_frequencies_by_group(tokens, groups, n=2, top=args.top).to_csv(
            out / "bigrams_by_intention.csv", index=False)

        by_group = sentiment_by_group(scores, groups)
        by_group.to_csv(out / "sentiment_by_intention.csv", index=False)
        plots.plot_sentiment_by_group(by_group, pics / "sentiment_by_intention.png")
        print("\n--- Sentiment by intention ---")
        print(by_group.to_string(index=False))

        distinct = distinctive_terms(tokens, groups, top=10)
        distinct.to_csv(out / "distinctive_words_by_intention.csv", index=False)
        plots.plot_group_frequencies(distinct, "term", "tfidf", "Distinctive words by intention (TF-IDF)",
                                     pics / "distinctive_words_by_intention.png")
        summary["intention_counts"] = df[args.label_col].value_counts().to_dict()

    write_json(summary, out / "summary.json")
    print(f"\nSaved tables to {out} and figures to {pics}")
    return summary


if __name__ == "__main__":
    main()
