"""
    This file turns tokenized responses into model inputs:
    - vocabulary (index 0 = padding, 1 = unknown)
    - integer sequences, padded / truncated to a fixed length
    - label indices and one-hot label vectors
    - a stratified train/test split
"""

from collections import Counter

import numpy as np
from sklearn.model_selection import train_test_split

PAD, UNK = "<pad>", "<unk>"
PAD_ID, UNK_ID = 0, 1


def build_vocab(token_lists, min_count=1, max_size=None):
    cnt = Counter()
    for toks in token_lists:
        cnt.update(toks)
    words = [w for w, c in cnt.items() if c >= min_count]
    words = sorted(words, key=lambda w: (-cnt[w], w))  # freq desc, tie-break lexicographic
    if max_size is not None:
        words = words[:max_size]
    itos = [PAD, UNK] + words
    return {w: i for i, w in enumerate(itos)}


def texts_to_sequences(token_lists, stoi):
    unk = stoi.get(UNK, UNK_ID)
    return [[stoi.get(w, unk) for w in toks] for toks in token_lists]


def pad_sequences(seqs, maxlen=None, padding="post", truncating="post", value=PAD_ID):
    """
    Pad / truncate integer sequences into an (n, maxlen) int64 array.

    padding="post" appends `value` after the tokens, "pre" puts it in front.
    truncating="post" keeps the first maxlen tokens, "pre" keeps the last.
    maxlen=None uses the longest sequence (at least 1).
    """
    if padding not in ("pre", "post"):
        raise ValueError(f"padding must be 'pre' or 'post', got {padding!r}")
    if truncating not in ("pre", "post"):
        raise ValueError(f"truncating must be 'pre' or 'post', got {truncating!r}")
    seqs = [list(s) for s in seqs]
    if maxlen is None:
        maxlen = max([len(s) for s in seqs] + [1])
    if maxlen < 1:
        raise ValueError(f"maxlen must be >= 1, got {maxlen}")

    out = np.full((len(seqs), maxlen), value, dtype=np.int64)
    for i, s in enumerate(seqs):
        if not s:
            continue
        s = s[:maxlen] if truncating == "post" else s[-maxlen:]
        if padding == "post":
            out[i, :len(s)] = s
        else:
            out[i, maxlen - len(s):] = s
    return out


def encode_labels(labels, classes=None):
    labels = list(labels)
    if classes is None:
        classes = sorted(set(labels), key=str)
    classes = list(classes)
    y_map = {c: i for i, c in enumerate(classes)}
    unknown = sorted({l for l in labels if l not in y_map}, key=str)
    if unknown:
        raise ValueError(f"labels not in classes {classes}: {unknown}")
    return np.array([y_map[l] for l in labels], dtype=np.int64), classes


def one_hot(y_idx, num_classes):
    y_idx = np.asarray(y_idx, dtype=np.int64)
    if y_idx.size and (y_idx.min() < 0 or y_idx.max() >= num_classes):
        raise ValueError(f"label index out of range for {num_classes} classes")
    out = np.zeros((len(y_idx), num_classes), dtype=np.float32)
    out[np.arange(len(y_idx)), y_idx] = 1.0
    return out


# stratify by label so every intention appears on both sides
def stratified_split(labels, test_size=0.2, seed=42):
    labels = list(labels)
    idx = np.arange(len(labels))
    counts = Counter(labels)
    stratify = labels if min(counts.values()) >= 2 else None
    if stratify is None:
        print("[split] a class has fewer than 2 members; falling back to an unstratified split")
    train_idx, test_idx = train_test_split(idx, test_size=test_size, random_state=seed, stratify=stratify)
    return np.sort(train_idx), np.sort(test_idx)
