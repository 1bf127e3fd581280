import numpy as np
import pytest

from fertility_models.sequences import build_vocab
from fertility_models.word2vec import W2VConfig, train_word2vec, similar_words, embedding_matrix

DOCS = [["baby", "family", "joy"], ["money", "cost", "housing"]] * 20


def _kv():
    return train_word2vec(DOCS, W2VConfig(vector_size=8, min_count=1, epochs=5, seed=3))


def test_train_word2vec_vocab_and_size():
    kv = _kv()
    assert kv.vector_size == 8
    assert {"baby", "money"}.issubset(set(kv.index_to_key))


def test_train_word2vec_empty_corpus():
    with pytest.raises(ValueError):
        train_word2vec([[], []])


def test_similar_words():
    kv = _kv()
    sim = similar_words(kv, "baby", topn=3)
    assert list(sim.columns) == ["word", "similarity"]
    assert len(sim) == 3 and "baby" not in set(sim["word"])
    assert similar_words(kv, "zebra").empty


def test_embedding_matrix_alignment():
    kv = _kv()
    stoi = build_vocab(DOCS + [["unseen"]])
    mat = embedding_matrix(kv, stoi, 8)
    assert mat.shape == (len(stoi), 8)
    assert np.allclose(mat[0], 0.0)
    assert np.allclose(mat[stoi["baby"]], kv["baby"])
    assert not np.allclose(mat[stoi["unseen"]], 0.0)
    with pytest.raises(ValueError):
        embedding_matrix(kv, stoi, 16)
