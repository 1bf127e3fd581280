"""
    This file defines the word-embedding + dense classifier for intentions.
    - Embedding layer -> masked average pooling -> dense ReLU -> softmax head
    - Training loop on one-hot targets with a held-out validation share
    - Predict / evaluate / encode helpers
    - Save/load artifacts (state_dict + meta)
"""

import os
import pickle
import random
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd
import torch
import torch.nn as nn
from sklearn.metrics import accuracy_score, classification_report, confusion_matrix, f1_score
from torch.utils.data import DataLoader, TensorDataset
from tqdm.auto import tqdm

from fertility_models.sequences import PAD_ID


def set_seed(seed=42):
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    torch.cuda.manual_seed_all(seed)


# model
class EmbeddingClassifier(nn.Module):
    def __init__(self, vocab_size, num_classes, emb_dim=50, hidden=16, dropout=0.2):
        super().__init__()
        self.emb = nn.Embedding(vocab_size, emb_dim, padding_idx=PAD_ID)
        self.head = nn.Sequential(
            nn.Linear(emb_dim, hidden),
            nn.ReLU(),
            nn.Dropout(dropout),
            nn.Linear(hidden, num_classes),
        )

    def forward(self, x):
        mask = (x != PAD_ID).float().unsqueeze(-1)     # (B,T,1)
        emb = self.emb(x)                              # (B,T,E)
        denom = torch.clamp(mask.sum(1), min=1.0)
        z = (emb * mask).sum(1) / denom                # (B,E)
        return self.head(z), z  # logits for classification, z for embeddings


# config
@dataclass
class ClassifierConfig:
    emb_dim: int = 50
    hidden: int = 16
    dropout: float = 0.2
    max_len: int = 50
    min_count: int = 1
    vocab_max_size: Optional[int] = 5000
    padding: str = "post"              # "pre" | "post"
    freeze_emb: bool = False
    batch_size: int = 16
    epochs: int = 30
    lr: float = 1e-3
    weight_decay: float = 0.0
    val_split: float = 0.1
    seed: int = 42
    device: str = "cuda" if torch.cuda.is_available() else "cpu"


def _loader(X, Y, batch_size, shuffle, seed=0):
    ds = TensorDataset(torch.as_tensor(X, dtype=torch.long), torch.as_tensor(Y, dtype=torch.float32))
    gen = torch.Generator().manual_seed(seed)
    return DataLoader(ds, batch_size=batch_size, shuffle=shuffle, generator=gen if shuffle else None)


def _validation_rows(n, val_split, seed):
    if val_split <= 0 or n < 2:
        return np.arange(n), np.array([], dtype=np.int64)
    n_val = min(max(1, int(round(n * val_split))), n - 1)
    perm = np.random.RandomState(seed).permutation(n)
    return np.sort(perm[n_val:]), np.sort(perm[:n_val])


def _run_epoch(model, dl, crit, device, optim=None):
    training = optim is not None
    model.train(training)
    tot, correct, n = 0.0, 0, 0
    with torch.set_grad_enabled(training):
        for xb, yb in dl:
            xb, yb = xb.to(device), yb.to(device)
            if training:
                optim.zero_grad()
            logits, _ = model(xb)
            loss = crit(logits, yb)
            if training:
                loss.backward()
                torch.nn.utils.clip_grad_norm_(model.parameters(), 1.0)
                optim.step()
            tot += loss.item() * xb.size(0)
            correct += (logits.argmax(-1) == yb.argmax(-1)).sum().item()
            n += xb.size(0)
    return tot / max(n, 1), correct / max(n, 1)


def train_classifier(X, Y, cfg, vocab_size, embedding_init=None):
    """
    Train on padded sequences X (n, max_len) and one-hot targets Y (n, C).

    Returns (model, history); history has one row per epoch with training
    loss/accuracy and, when a validation share is held out, val_loss and
    val_accuracy (NaN otherwise).
    """
    X = np.asarray(X)
    Y = np.asarray(Y, dtype=np.float32)
    if X.shape[0] != Y.shape[0]:
        raise ValueError(f"row mismatch: X={X.shape[0]} Y={Y.shape[0]}")
    if X.shape[0] == 0:
        raise ValueError("no training rows")

    set_seed(cfg.seed)
    device = cfg.device
    model = EmbeddingClassifier(vocab_size=vocab_size, num_classes=Y.shape[1],
                                emb_dim=cfg.emb_dim, hidden=cfg.hidden, dropout=cfg.dropout)
    if embedding_init is not None:
        w = torch.as_tensor(np.asarray(embedding_init), dtype=torch.float32)
        if tuple(w.shape) != (vocab_size, cfg.emb_dim):
            raise ValueError(f"embedding_init shape {tuple(w.shape)} != {(vocab_size, cfg.emb_dim)}")
        model.emb.weight.data.copy_(w)
        if cfg.freeze_emb:
            model.emb.weight.requires_grad = False
    model.to(device)

    tr, va = _validation_rows(len(X), cfg.val_split, cfg.seed)
    train_dl = _loader(X[tr], Y[tr], cfg.batch_size, shuffle=True, seed=cfg.seed)
    val_dl = _loader(X[va], Y[va], cfg.batch_size, shuffle=False) if len(va) else None

    params = [p for p in model.parameters() if p.requires_grad]
    optim = torch.optim.Adam(params, lr=cfg.lr, weight_decay=cfg.weight_decay)
    crit = nn.CrossEntropyLoss()  # accepts class-probability (one-hot) targets

    history = []
    for e in tqdm(range(1, cfg.epochs + 1), desc="train", leave=False):
        loss, acc = _run_epoch(model, train_dl, crit, device, optim)
        val_loss, val_acc = (_run_epoch(model, val_dl, crit, device) if val_dl is not None
                             else (float("nan"), float("nan")))
        history.append({"epoch": e, "loss": loss, "accuracy": acc,
                        "val_loss": val_loss, "val_accuracy": val_acc})
        print(f"[epoch {e}/{cfg.epochs}] loss={loss:.4f} acc={acc:.4f} "
              f"val_loss={val_loss:.4f} val_acc={val_acc:.4f}")
    model.eval()
    return model, pd.DataFrame(history, columns=["epoch", "loss", "accuracy", "val_loss", "val_accuracy"])


def predict_proba(model, X, cfg):
    X = np.asarray(X)
    dummy = np.zeros((len(X), 1), dtype=np.float32)
    dl = _loader(X, dummy, cfg.batch_size, shuffle=False)
    model.eval()
    out = []
    with torch.no_grad():
        for xb, _ in dl:
            logits, _ = model(xb.to(cfg.device))
            out.append(torch.softmax(logits, dim=-1).cpu().numpy())
    if not out:
        return np.zeros((0, model.head[-1].out_features), dtype=np.float32)
    return np.vstack(out).astype(np.float32)


def predict(model, X, cfg):
    return predict_proba(model, X, cfg).argmax(axis=1)


#  return fixed-size document embeddings (pooled word vectors)
def encode_documents(model, X, cfg):
    X = np.asarray(X)
    dummy = np.zeros((len(X), 1), dtype=np.float32)
    dl = _loader(X, dummy, cfg.batch_size, shuffle=False)
    model.eval()
    Z = []
    with torch.no_grad():
        for xb, _ in dl:
            _, z = model(xb.to(cfg.device))
            Z.append(z.cpu().numpy())
    if not Z:
        return np.zeros((0, model.emb.embedding_dim), dtype=np.float32)
    return np.vstack(Z).astype(np.float32)


def evaluate(y_true, y_pred, classes):
    labels = list(range(len(classes)))
    names = [str(c) for c in classes]
    return {
        "accuracy": float(accuracy_score(y_true, y_pred)),
        "macro_f1": float(f1_score(y_true, y_pred, labels=labels, average="macro", zero_division=0)),
        "report": classification_report(y_true, y_pred, labels=labels, target_names=names, zero_division=0),
        "confusion": confusion_matrix(y_true, y_pred, labels=labels),
    }


# save / load
def save_artifacts(out_dir, model, stoi, classes, cfg):
    os.makedirs(out_dir, exist_ok=True)
    torch.save(model.state_dict(), os.path.join(out_dir, "classifier.pt"))
    with open(os.path.join(out_dir, "meta.pkl"), "wb") as f:
        pickle.dump({"stoi": stoi, "classes": classes, "cfg": cfg}, f)


def load_artifacts(out_dir):
    with open(os.path.join(out_dir, "meta.pkl"), "rb") as f:
        meta = pickle.load(f)
    stoi = meta["stoi"]; classes = meta["classes"]; cfg: ClassifierConfig = meta["cfg"]
    model = EmbeddingClassifier(vocab_size=len(stoi), num_classes=len(classes),
                                emb_dim=cfg.emb_dim, hidden=cfg.hidden, dropout=cfg.dropout)
    model.load_state_dict(torch.load(os.path.join(out_dir, "classifier.pt"), map_location="cpu"))
    model.eval()
    cfg.device = "cpu"
    return model, stoi, classes, cfg
