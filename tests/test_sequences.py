import numpy as np
import pytest

from fertility_models.sequences import (
    PAD, UNK, build_vocab, texts_to_sequences, pad_sequences, encode_labels, one_hot, stratified_split,
)


def test_build_vocab_order_and_limits():
    tl = [["baby", "money", "baby"], ["money", "cost", "baby"]]
    stoi = build_vocab(tl)
    assert stoi[PAD] == 0 and stoi[UNK] == 1
    assert [w for w, _ in sorted(stoi.items(), key=lambda kv: kv[1])][2:] == ["baby", "money", "cost"]
    assert "cost" not in build_vocab(tl, min_count=2)
    assert len(build_vocab(tl, max_size=1)) == 3


def test_texts_to_sequences_maps_unknown():
    stoi = build_vocab([["baby", "family"]])
    assert texts_to_sequences([["baby", "debt"], []], stoi) == [[2, 1], []]


def test_pad_sequences_post_and_pre():
    seqs = [[5, 6, 7], [8], []]
    post = pad_sequences(seqs, maxlen=4)
    assert post.dtype == np.int64
    assert post.tolist() == [[5, 6, 7, 0], [8, 0, 0, 0], [0, 0, 0, 0]]
    pre = pad_sequences(seqs, maxlen=4, padding="pre")
    assert pre.tolist() == [[0, 5, 6, 7], [0, 0, 0, 8], [0, 0, 0, 0]]


def test_pad_sequences_truncation():
    assert pad_sequences([[1, 2, 3, 4]], maxlen=2).tolist() == [[1, 2]]
    assert pad_sequences([[1, 2, 3, 4]], maxlen=2, truncating="pre").tolist() == [[3, 4]]


def test_pad_sequences_default_maxlen_and_errors():
    assert pad_sequences([[1, 2], [3]]).shape == (2, 2)
    assert pad_sequences([[], []]).shape == (2, 1)
    with pytest.raises(ValueError):
        pad_sequences([[1]], padding="middle")
    with pytest.raises(ValueError):
        pad_sequences([[1]], truncating="both")
    with pytest.raises(ValueError):
        pad_sequences([[1]], maxlen=0)


def test_encode_labels_and_one_hot():
    y, classes = encode_labels(["yes", "no", "unsure", "yes"])
    assert classes == ["no", "unsure", "yes"]
    assert y.tolist() == [2, 0, 1, 2]
    Y = one_hot(y, len(classes))
    assert Y.shape == (4, 3)
    assert Y.sum(axis=1).tolist() == [1.0] * 4
    assert Y.argmax(axis=1).tolist() == y.tolist()

    y2, _ = encode_labels(["no"], classes)
    assert y2.tolist() == [0]
    with pytest.raises(ValueError):
        encode_labels(["maybe"], classes)
    with pytest.raises(ValueError):
        one_hot([3], 3)


def test_stratified_split_keeps_every_class():
    labels = ["yes"] * 10 + ["no"] * 10 + ["unsure"] * 10
    tr, te = stratified_split(labels, test_size=0.2, seed=0)
    assert len(te) == 6 and len(tr) == 24
    assert set(tr).isdisjoint(te)
    assert sorted(labels[i] for i in te) == ["no", "no", "unsure", "unsure", "yes", "yes"]


def test_stratified_split_falls_back_for_singletons():
    tr, te = stratified_split(["yes"] * 9 + ["no"], test_size=0.2, seed=0)
    assert len(tr) + len(te) == 10
