"""
    This file trains/evaluates the word-embedding intention classifier.
    Usage: python -m fertility_scripts.train_classifier [--epochs 30] [--w2v-init]
"""
import os
import sys
import argparse
from dataclasses import asdict
from pathlib import Path

import numpy as np
import pandas as pd
import torch

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from fertility_scripts.config import (
    CLEANED_RESPONSES, SPLIT_FILE, CLASSIFIER_OUTPUT, PIC_DIR, ID_COL, CLEAN_COL, LABEL_COL, SEED,
)
from fertility_scripts.common import load_table, load_frozen_test_indices, write_json, bool_flag

from fertility_models.preprocess import tokenize_responses
from fertility_models.sequences import (
    build_vocab, texts_to_sequences, pad_sequences, encode_labels, one_hot, stratified_split,
)
from fertility_models.classifier import (
    ClassifierConfig, set_seed, train_classifier, predict, evaluate, encode_documents, save_artifacts,
)
from fertility_models.word2vec import W2VConfig, train_word2vec, embedding_matrix, similar_words
from fertility_models import plots

# ---- config / output (defaults) ----
CFG = ClassifierConfig(emb_dim=50, hidden=16, dropout=0.2, max_len=50, padding="post",
                       epochs=30, batch_size=16, lr=1e-3, weight_decay=0.0,
                       val_split=0.1, seed=SEED)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Train the embedding + dense intention classifier.")
    p.add_argument("--input", default=str(CLEANED_RESPONSES))
    p.add_argument("--split-file", default=str(SPLIT_FILE))
    p.add_argument("--test-size", type=float, default=0.2)
    p.add_argument("--tokenizer", choices=["word", "regexp"], default="word")
    p.add_argument("--output", default=CLASSIFIER_OUTPUT)
    p.add_argument("--pic-dir", default=PIC_DIR)
    p.add_argument("--id-col", default=ID_COL)
    p.add_argument("--clean-col", default=CLEAN_COL)
    p.add_argument("--label-col", default=LABEL_COL)

    # tweakable training/model knobs (override CFG fields)
    p.add_argument("--emb-dim", type=int, default=CFG.emb_dim)
    p.add_argument("--hidden", type=int, default=CFG.hidden)
    p.add_argument("--dropout", type=float, default=CFG.dropout)
    p.add_argument("--max-len", type=int, default=CFG.max_len)
    p.add_argument("--padding", choices=["pre", "post"], default=CFG.padding)
    p.add_argument("--min-count", type=int, default=CFG.min_count)
    p.add_argument("--vocab-max-size", type=int, default=CFG.vocab_max_size)
    p.add_argument("--epochs", type=int, default=CFG.epochs)
    p.add_argument("--batch-size", type=int, default=CFG.batch_size)
    p.add_argument("--lr", type=float, default=CFG.lr)
    p.add_argument("--weight-decay", type=float, default=CFG.weight_decay)
    p.add_argument("--val-split", type=float, default=CFG.val_split)
    p.add_argument("--seed", type=int, default=CFG.seed)
    p.add_argument("--device", type=str, default=CFG.device)

    # optional Word2Vec initialisation of the embedding layer
    bool_flag(p, "w2v-init", False)
    bool_flag(p, "freeze-emb", CFG.freeze_emb)
    p.add_argument("--w2v-epochs", type=int, default=W2VConfig.epochs)
    return p.parse_args(argv)


def _apply_overrides(cfg, args):
    cfg.emb_dim = args.emb_dim
    cfg.hidden = args.hidden
    cfg.dropout = args.dropout
    cfg.max_len = args.max_len
    cfg.padding = args.padding
    cfg.min_count = args.min_count
    cfg.vocab_max_size = args.vocab_max_size
    cfg.epochs = args.epochs
    cfg.batch_size = args.batch_size
    cfg.lr = args.lr
    cfg.weight_decay = args.weight_decay
    cfg.val_split = args.val_split
    cfg.seed = args.seed
    cfg.device = args.device
    cfg.freeze_emb = args.freeze_emb
    return cfg


def _split(df, args):
    if os.path.exists(args.split_file):
        test_idx = load_frozen_test_indices(args.split_file)
        if test_idx and max(test_idx) >= len(df):
            raise SystemExit(f"{args.split_file} does not match {args.input}: index {max(test_idx)} >= {len(df)} rows")
        mask = np.zeros(len(df), dtype=bool); mask[test_idx] = True
        return np.flatnonzero(~mask), np.flatnonzero(mask), f"frozen({args.split_file})"
    train_idx, test_idx = stratified_split(df[args.label_col].tolist(), test_size=args.test_size, seed=args.seed)
    return train_idx, test_idx, f"stratified(test_size={args.test_size}, seed={args.seed})"


def main(argv=None):
    args = parse_args(argv)
    cfg = _apply_overrides(ClassifierConfig(**asdict(CFG)), args)
    out = Path(args.output); out.mkdir(parents=True, exist_ok=True)
    pics = Path(args.pic_dir); pics.mkdir(parents=True, exist_ok=True)
    set_seed(cfg.seed)

    # load data (rows without an intention cannot be used)
    df = load_table(args.input, [args.id_col, args.clean_col, args.label_col])
    df = df.dropna(subset=[args.label_col]).reset_index(drop=True)
    df[args.clean_col] = df[args.clean_col].fillna("")

    train_idx, test_idx, split_mode = _split(df, args)
    tokens = tokenize_responses(df[args.clean_col], method=args.tokenizer)
    tok_tr = [tokens[i] for i in train_idx]
    tok_te = [tokens[i] for i in test_idx]

    # vocab from train only; classes from all rows
    stoi = build_vocab(tok_tr, min_count=cfg.min_count, max_size=cfg.vocab_max_size)
    labels = df[args.label_col].astype(str).tolist()
    _, classes = encode_labels(labels)
    y_tr, _ = encode_labels([labels[i] for i in train_idx], classes)
    y_te, _ = encode_labels([labels[i] for i in test_idx], classes)
    unseen = sorted(set(classes) - {labels[i] for i in train_idx})
    if unseen:
        print(f"[data] classes with no training rows: {unseen}")

    X_tr = pad_sequences(texts_to_sequences(tok_tr, stoi), maxlen=cfg.max_len, padding=cfg.padding, truncating=cfg.padding)
    X_te = pad_sequences(texts_to_sequences(tok_te, stoi), maxlen=cfg.max_len, padding=cfg.padding, truncating=cfg.padding)
    Y_tr = one_hot(y_tr, len(classes))
    print(f"[data] train={X_tr.shape} test={X_te.shape} vocab={len(stoi)} classes={classes}")

    init = None
    if args.w2v_init:
        kv = train_word2vec(tok_tr, W2VConfig(vector_size=cfg.emb_dim, epochs=args.w2v_epochs, seed=cfg.seed))
        init = embedding_matrix(kv, stoi, cfg.emb_dim, seed=cfg.seed)
        probe = next((w for w in ("children", "child", "baby", "family") if w in kv), None)
        if probe is not None:
            print(f"[word2vec] nearest words to '{probe}':")
            print(similar_words(kv, probe, topn=5).to_string(index=False))

    # train
    model, history = train_classifier(X_tr, Y_tr, cfg, vocab_size=len(stoi), embedding_init=init)
    history.to_csv(out / "history.csv", index=False)

    # evaluate
    y_pred = predict(model, X_te, cfg)
    res = evaluate(y_te, y_pred, classes)

    print("\n--- Embedding intention classifier ---")
    print(f"Split     : {split_mode}")
    print(f"Accuracy  : {res['accuracy']:.4f}")
    print(f"Macro-F1  : {res['macro_f1']:.4f}")
    print(res["report"])
    print("Confusion matrix:\n", res["confusion"])

    # save artifacts / outputs
    save_artifacts(out, model, stoi, classes, cfg)
    pd.DataFrame({
        args.id_col: df[args.id_col].values[test_idx],
        "text": df[args.clean_col].values[test_idx],
        args.label_col: [classes[i] for i in y_te],
        "pred": [classes[i] for i in y_pred],
    }).to_csv(out / "preds.csv", index=False)
    with open(out / "classification_report.txt", "w", encoding="utf-8") as f:
        f.write(res["report"])
    write_json({"accuracy": res["accuracy"], "macro_f1": res["macro_f1"], "split": split_mode,
                "confusion": res["confusion"], "classes": classes}, out / "metrics.json")

    plots.plot_history(history, pics / "classifier_history.png")
    plots.plot_confusion(res["confusion"], classes, pics / "classifier_confusion.png")

    # export test embeddings
    Z = encode_documents(model, X_te, cfg)
    np.save(out / "emb_test.npy", Z.astype(np.float32))
    if len(Z) > 1:
        plots.plot_embedding_projection(Z, [classes[i] for i in y_te], pics / "classifier_embeddings.png", seed=cfg.seed)

    meta = {
        "data": args.input,
        "split": split_mode,
        "n_train": len(train_idx),
        "n_test": len(test_idx),
        "cfg": asdict(cfg),
        "classes": classes,
        "w2v_init": args.w2v_init,
        "torch": torch.__version__,
    }
    write_json(meta, out / "meta.json")
    print(f"\nSaved artifacts and metrics to: {out}")
    return res


if __name__ == "__main__":
    main()
