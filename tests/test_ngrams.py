import pytest

from fertility_models.ngrams import make_ngrams, ngram_frequencies, ngram_frequencies_by_group


def test_make_ngrams():
    assert make_ngrams(["want", "another", "baby"], 2) == ["want another", "another baby"]
    assert make_ngrams(["want", "another", "baby"], 3) == ["want another baby"]
    assert make_ngrams(["baby"], 2) == []


def test_make_ngrams_rejects_bad_n():
    with pytest.raises(ValueError):
        make_ngrams(["a"], 0)


def test_ngrams_do_not_cross_responses():
    freqs = ngram_frequencies([["cost", "living"], ["housing", "cost"]], n=2)
    assert set(freqs["ngram"]) == {"cost living", "housing cost"}
    assert "living housing" not in set(freqs["ngram"])


def test_ngram_frequencies_ordering_and_top():
    tl = [["child", "care", "cost"], ["child", "care"], ["child", "care"]]
    freqs = ngram_frequencies(tl, n=2)
    assert freqs.iloc[0].to_dict() == {"ngram": "child care", "count": 3}
    assert freqs["count"].tolist() == sorted(freqs["count"].tolist(), reverse=True)
    assert len(ngram_frequencies(tl, n=2, top=1)) == 1


def test_ngram_frequencies_by_group():
    f = ngram_frequencies_by_group([["big", "family"], ["big", "family"], ["no", "money"]],
                                   ["yes", "yes", "no"], n=2)
    assert f.to_dict("records") == [
        {"group": "no", "ngram": "no money", "count": 1},
        {"group": "yes", "ngram": "big family", "count": 2},
    ]
