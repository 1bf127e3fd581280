import numpy as np
import pytest
import torch

from fertility_models.classifier import (
    ClassifierConfig, EmbeddingClassifier, train_classifier, predict, predict_proba,
    evaluate, encode_documents, save_artifacts, load_artifacts,
)
from fertility_models.sequences import one_hot, pad_sequences

VOCAB = 10


def _data(n=60, seed=0):
    # class 0 uses ids 2-5, class 1 uses ids 6-9
    rng = np.random.RandomState(seed)
    seqs, y = [], []
    for i in range(n):
        c = i % 2
        lo = 2 if c == 0 else 6
        seqs.append(list(rng.randint(lo, lo + 4, size=rng.randint(2, 7))))
        y.append(c)
    return pad_sequences(seqs, maxlen=8), np.array(y)


def _cfg(**kw):
    base = dict(emb_dim=8, hidden=8, dropout=0.0, max_len=8, epochs=25, batch_size=8,
                lr=0.02, val_split=0.2, seed=0, device="cpu")
    base.update(kw)
    return ClassifierConfig(**base)


def test_forward_shapes_and_padding_mask():
    model = EmbeddingClassifier(vocab_size=VOCAB, num_classes=3, emb_dim=4, hidden=5)
    x = torch.tensor([[2, 3, 0, 0], [0, 0, 0, 0]])
    logits, z = model(x)
    assert logits.shape == (2, 3) and z.shape == (2, 4)
    # all-padding rows pool to the zero vector
    assert torch.allclose(z[1], torch.zeros(4))
    # padding does not change the pooled vector
    _, z_short = model(torch.tensor([[2, 3]]))
    assert torch.allclose(z[0], z_short[0], atol=1e-6)


def test_train_classifier_learns_separable_data():
    X, y = _data()
    cfg = _cfg()
    model, history = train_classifier(X, one_hot(y, 2), cfg, vocab_size=VOCAB)
    assert list(history.columns) == ["epoch", "loss", "accuracy", "val_loss", "val_accuracy"]
    assert history["epoch"].tolist() == list(range(1, cfg.epochs + 1))
    assert history["loss"].iloc[-1] < history["loss"].iloc[0]
    assert history["val_loss"].notna().all()

    pred = predict(model, X, cfg)
    assert pred.shape == (len(X),)
    assert (pred == y).mean() >= 0.9

    proba = predict_proba(model, X, cfg)
    assert proba.shape == (len(X), 2)
    assert np.allclose(proba.sum(axis=1), 1.0, atol=1e-5)


def test_train_without_validation():
    X, y = _data(n=20)
    _, history = train_classifier(X, one_hot(y, 2), _cfg(epochs=2, val_split=0.0), vocab_size=VOCAB)
    assert history["val_loss"].isna().all()


def test_embedding_init_is_used_and_frozen():
    X, y = _data(n=20)
    init = np.random.RandomState(1).randn(VOCAB, 8).astype(np.float32)
    init[0] = 0.0
    model, _ = train_classifier(X, one_hot(y, 2), _cfg(epochs=2, freeze_emb=True), vocab_size=VOCAB,
                                embedding_init=init)
    assert np.allclose(model.emb.weight.detach().numpy(), init)
    with pytest.raises(ValueError):
        train_classifier(X, one_hot(y, 2), _cfg(epochs=1), vocab_size=VOCAB, embedding_init=np.zeros((3, 8)))


def test_train_classifier_input_errors():
    X, y = _data(n=10)
    with pytest.raises(ValueError):
        train_classifier(X, one_hot(y[:5], 2), _cfg(), vocab_size=VOCAB)


def test_evaluate():
    res = evaluate([0, 1, 1, 2], [0, 1, 2, 2], ["no", "unsure", "yes"])
    assert res["accuracy"] == pytest.approx(0.75)
    assert res["confusion"].tolist() == [[1, 0, 0], [0, 1, 1], [0, 0, 1]]
    assert "unsure" in res["report"]
    assert 0 < res["macro_f1"] <= 1


def test_encode_documents_and_artifacts(tmp_path):
    X, y = _data(n=20)
    cfg = _cfg(epochs=2)
    model, _ = train_classifier(X, one_hot(y, 2), cfg, vocab_size=VOCAB)
    Z = encode_documents(model, X, cfg)
    assert Z.shape == (20, cfg.emb_dim)

    stoi = {f"w{i}": i for i in range(VOCAB)}
    save_artifacts(tmp_path / "clf", model, stoi, ["no", "yes"], cfg)
    model2, stoi2, classes2, cfg2 = load_artifacts(tmp_path / "clf")
    assert stoi2 == stoi and classes2 == ["no", "yes"] and cfg2.emb_dim == cfg.emb_dim
    assert np.allclose(predict_proba(model2, X, cfg2), predict_proba(model, X, cfg), atol=1e-6)
