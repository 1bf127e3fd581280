"""
    This file writes the engineered feature table: one row per respondent
    with covariates, intention, text statistics, sentiment scores and topic
    proportions.
    Usage: python -m fertility_scripts.build_features
"""

import os
import sys
import argparse

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from fertility_scripts.config import (
    CLEANED_RESPONSES, STOPWORD_FILE, FEATURES_FILE, TOPICS_OUTPUT,
    ID_COL, TEXT_COL, CLEAN_COL, LABEL_COL,
)
from fertility_scripts.common import load_table, covariate_columns, bool_flag

from fertility_models.preprocess import load_stopwords, tokenize_responses
from fertility_models.sentiment import SentimentConfig, make_analyzer, score_texts
from fertility_models.topics import TopicConfig, TopicModel
from fertility_models.features import build_feature_table


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Build the engineered feature table.")
    p.add_argument("--input", default=str(CLEANED_RESPONSES))
    p.add_argument("--output", default=str(FEATURES_FILE))
    p.add_argument("--stopwords", default=str(STOPWORD_FILE))
    bool_flag(p, "nltk-stopwords", True)
    p.add_argument("--tokenizer", choices=["word", "regexp"], default="word")
    p.add_argument("--lexicon", default=None, help="custom VADER lexicon file")
    p.add_argument("--topic-model", default=os.path.join(TOPICS_OUTPUT, "lda"),
                   help="saved LDA directory; fitted on the fly when missing")
    p.add_argument("--num-topics", type=int, default=TopicConfig.num_topics)
    bool_flag(p, "topics", True)
    p.add_argument("--id-col", default=ID_COL)
    p.add_argument("--text-col", default=TEXT_COL)
    p.add_argument("--clean-col", default=CLEAN_COL)
    p.add_argument("--label-col", default=LABEL_COL)
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    df = load_table(args.input, [args.id_col, args.clean_col])
    df[args.clean_col] = df[args.clean_col].fillna("")

    sw_path = args.stopwords if os.path.exists(args.stopwords) else None
    stop = load_stopwords(sw_path, include_nltk=args.nltk_stopwords)

    sent_col = args.text_col if args.text_col in df.columns else args.clean_col
    scores = score_texts(df[sent_col].fillna("").tolist(), make_analyzer(SentimentConfig(lexicon_file=args.lexicon)))

    gamma = None
    if args.topics:
        tokens = tokenize_responses(df[args.clean_col], stopwords=stop, method=args.tokenizer, min_len=2)
        if os.path.isdir(args.topic_model):
            print(f"[features] using saved topic model {args.topic_model}")
            tm = TopicModel.load(args.topic_model)
        else:
            print(f"[features] no saved topic model; fitting LDA with k={args.num_topics}")
            tm = TopicModel(TopicConfig(num_topics=args.num_topics)).fit(tokens)
        gamma = tm.doc_topics(tokens)

    covariates = covariate_columns(df, [args.id_col, args.text_col, args.clean_col, args.label_col])
    table = build_feature_table(df, id_col=args.id_col, label_col=args.label_col, covariates=covariates,
                                text_col=args.clean_col, stopwords=stop, method=args.tokenizer,
                                sentiment=scores, topics=gamma)

    os.makedirs(os.path.dirname(os.path.abspath(args.output)), exist_ok=True)
    table.to_csv(args.output, index=False)
    print(f"[features] {table.shape[0]} rows x {table.shape[1]} columns")
    print(f"Feature table saved to {args.output}")
    return table


if __name__ == "__main__":
    main()
