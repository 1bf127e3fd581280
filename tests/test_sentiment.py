import pandas as pd
import pytest

from fertility_models.sentiment import (
    SentimentConfig, make_analyzer, label_compound, score_texts,
    sentiment_by_group, word_sentiment_contributions,
)


@pytest.fixture
def analyzer(lexicon_file):
    return make_analyzer(SentimentConfig(lexicon_file=lexicon_file))


def test_label_compound_thresholds():
    cfg = SentimentConfig()
    assert label_compound(0.05, cfg) == "positive"
    assert label_compound(-0.05, cfg) == "negative"
    assert label_compound(0.0, cfg) == "neutral"
    assert label_compound(0.3, SentimentConfig(pos_threshold=0.5)) == "neutral"


def test_score_texts(analyzer):
    scores = score_texts(["I love kids", "I hate debt", "", "a table"], analyzer)
    assert list(scores.columns) == ["neg", "neu", "pos", "compound", "sentiment"]
    assert len(scores) == 4
    assert scores.loc[0, "compound"] > 0.05 and scores.loc[0, "sentiment"] == "positive"
    assert scores.loc[1, "compound"] < -0.05 and scores.loc[1, "sentiment"] == "negative"
    assert scores.loc[2].drop("sentiment").tolist() == [0.0, 0.0, 0.0, 0.0]
    assert scores.loc[2, "sentiment"] == "neutral"
    assert scores.loc[3, "sentiment"] == "neutral"


def test_sentiment_by_group(analyzer):
    scores = score_texts(["I love kids", "happy", "I hate debt"], analyzer)
    summary = sentiment_by_group(scores, ["yes", "yes", "no"])
    assert summary["group"].tolist() == ["no", "yes"]
    yes = summary[summary["group"] == "yes"].iloc[0]
    assert yes["n"] == 2
    assert yes["share_positive"] == 1.0 and yes["share_negative"] == 0.0
    assert yes["mean_compound"] > 0
    with pytest.raises(ValueError):
        sentiment_by_group(scores, ["yes"])


def test_word_sentiment_contributions(analyzer):
    tl = [["love", "kids", "love"], ["worry", "money"], ["hate"]]
    contrib = word_sentiment_contributions(tl, analyzer)
    assert contrib["token"].tolist() == ["love", "hate", "worry"]
    love = contrib.iloc[0]
    assert love["count"] == 2
    assert love["contribution"] == pytest.approx(6.4)
    assert love["direction"] == "positive"
    assert contrib.iloc[1]["direction"] == "negative"
    assert len(word_sentiment_contributions(tl, analyzer, top=1)) == 1


def test_word_sentiment_contributions_no_hits(analyzer):
    out = word_sentiment_contributions([["table", "chair"]], analyzer)
    assert isinstance(out, pd.DataFrame) and out.empty
