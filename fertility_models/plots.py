"""
    This file draws the figures of the exploratory and classifier pipelines.
    Every function saves a PNG, closes the figure and returns the path.
"""

from pathlib import Path

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from sklearn.decomposition import PCA


def _save(fig, out_png):
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(out_png, dpi=200)
    plt.close(fig)
    return out_png


def _bar_label(ax, container, labels=None, fmt="{:.3f}", pad=3, fontsize=8):
    ax.bar_label(container, labels=labels, fmt=fmt, padding=pad, fontsize=fontsize)


# horizontal bars, largest on top
def plot_frequencies(freqs, label_col, value_col, title, out_png, top=20):
    df = freqs.head(top).iloc[::-1]
    fig, ax = plt.subplots(figsize=(7, max(3, 0.3 * len(df) + 1)))
    ax.barh(df[label_col].astype(str), df[value_col].values)
    ax.set_title(title)
    ax.set_xlabel(value_col)
    return _save(fig, out_png)


def plot_group_frequencies(freqs, label_col, value_col, title, out_png, top=10):
    groups = list(dict.fromkeys(freqs["group"]))
    if not groups:
        fig, ax = plt.subplots()
        ax.set_title(f"{title} (no data)")
        return _save(fig, out_png)
    fig, axes = plt.subplots(1, len(groups), figsize=(4 * len(groups), 4), squeeze=False)
    for ax, g in zip(axes[0], groups):
        part = freqs[freqs["group"] == g].head(top).iloc[::-1]
        ax.barh(part[label_col].astype(str), part[value_col].values)
        ax.set_title(str(g))
        ax.set_xlabel(value_col)
    fig.suptitle(title)
    return _save(fig, out_png)


def plot_sentiment_hist(scores, out_png, bins=30):
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.hist(scores["compound"].values, bins=bins, range=(-1, 1))
    ax.set_title(f"VADER compound sentiment for {len(scores)} responses")
    ax.set_xlabel("Compound sentiment (-1 ... +1)")
    ax.set_ylabel("Count")
    return _save(fig, out_png)


def plot_sentiment_by_group(summary, out_png):
    x = np.arange(len(summary))
    fig, ax = plt.subplots(figsize=(6, 4))
    bars = ax.bar(x, summary["mean_compound"].values)
    _bar_label(ax, bars)
    ax.axhline(0, color="black", linewidth=0.8)
    ax.set_xticks(x, summary["group"].astype(str).tolist())
    ax.set_title("Mean compound sentiment by intention")
    ax.set_xlabel("Intention"); ax.set_ylabel("Mean compound")
    return _save(fig, out_png)


def plot_topic_terms(terms, out_png, n=10):
    topics = sorted(terms["topic"].unique())
    if not topics:
        fig, ax = plt.subplots()
        ax.set_title("Top terms per topic (no data)")
        return _save(fig, out_png)
    ncols = min(len(topics), 3)
    nrows = int(np.ceil(len(topics) / ncols))
    fig, axes = plt.subplots(nrows, ncols, figsize=(4 * ncols, 3.5 * nrows), squeeze=False)
    for ax in axes.ravel()[len(topics):]:
        ax.axis("off")
    for ax, k in zip(axes.ravel(), topics):
        part = terms[terms["topic"] == k].sort_values("rank").head(n).iloc[::-1]
        ax.barh(part["term"], part["beta"].values)
        ax.set_title(f"Topic {k}")
        ax.set_xlabel("beta")
    fig.suptitle("Top terms per topic")
    return _save(fig, out_png)


def plot_topics_by_group(gamma, groups, out_png):
    gamma = np.asarray(gamma)
    cols = [f"topic_{k}" for k in range(gamma.shape[1])]
    means = pd.DataFrame(gamma, columns=cols).assign(group=list(groups)).groupby("group")[cols].mean()
    x = np.arange(len(means))
    width = 0.8 / max(1, len(cols))
    fig, ax = plt.subplots(figsize=(7, 4))
    for i, c in enumerate(cols):
        ax.bar(x + i * width - (len(cols) - 1) * width / 2, means[c].values, width, label=c)
    ax.set_xticks(x, [str(g) for g in means.index])
    ax.set_ylim(0, 1)
    ax.set_title("Mean topic proportion by intention")
    ax.set_xlabel("Intention"); ax.set_ylabel("Mean gamma")
    ax.legend(fontsize=8)
    return _save(fig, out_png)


def plot_history(history, out_png):
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(10, 4))
    ax1.plot(history["epoch"], history["loss"], label="train")
    ax2.plot(history["epoch"], history["accuracy"], label="train")
    if history["val_loss"].notna().any():
        ax1.plot(history["epoch"], history["val_loss"], label="validation")
        ax2.plot(history["epoch"], history["val_accuracy"], label="validation")
    ax1.set_title("Loss"); ax1.set_xlabel("Epoch"); ax1.legend()
    ax2.set_title("Accuracy"); ax2.set_xlabel("Epoch"); ax2.set_ylim(0, 1); ax2.legend()
    return _save(fig, out_png)


def plot_confusion(cm, classes, out_png):
    cm = np.asarray(cm)
    fig, ax = plt.subplots(figsize=(5, 4))
    im = ax.imshow(cm, cmap="Blues")
    fig.colorbar(im, ax=ax)
    ticks = np.arange(len(classes))
    ax.set_xticks(ticks, [str(c) for c in classes], rotation=30, ha="right")
    ax.set_yticks(ticks, [str(c) for c in classes])
    thresh = cm.max() / 2 if cm.size else 0
    for i in range(cm.shape[0]):
        for j in range(cm.shape[1]):
            ax.text(j, i, int(cm[i, j]), ha="center", va="center",
                    color="white" if cm[i, j] > thresh else "black")
    ax.set_xlabel("Predicted"); ax.set_ylabel("True")
    ax.set_title("Confusion matrix")
    return _save(fig, out_png)


def plot_embedding_projection(Z, labels, out_png, seed=42):
    Z = np.asarray(Z, dtype=np.float32)
    labels = list(labels)
    if Z.shape[0] != len(labels):
        raise ValueError(f"length mismatch: Z={Z.shape[0]} labels={len(labels)}")
    k = min(2, Z.shape[0], Z.shape[1])
    Y = PCA(n_components=k, random_state=seed).fit_transform(Z)
    if k < 2:
        Y = np.hstack([Y, np.zeros((Y.shape[0], 2 - k))])

    fig, ax = plt.subplots(figsize=(6, 5))
    for lab in sorted(set(labels), key=str):
        mask = np.array([l == lab for l in labels])
        ax.scatter(Y[mask, 0], Y[mask, 1], s=12, alpha=0.8, label=str(lab))
    ax.set_title("Document embeddings (PCA)")
    ax.set_xticks([]); ax.set_yticks([])
    ax.legend()
    return _save(fig, out_png)
