'''
    This file freezes a train/test split of the cleaned responses so the
    classifier is always evaluated on the same respondents.
    Returns a json file with the testing index.
'''

import os
import sys
import argparse
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from fertility_scripts.config import CLEANED_RESPONSES, SPLIT_FILE, LABEL_COL, SEED
from fertility_scripts.common import load_table, write_json

from fertility_models.sequences import stratified_split

TEST_SIZE = 0.2


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Freeze a stratified train/test split.")
    p.add_argument("--input", default=str(CLEANED_RESPONSES))
    p.add_argument("--output", default=str(SPLIT_FILE))
    p.add_argument("--label-col", default=LABEL_COL)
    p.add_argument("--test-size", type=float, default=TEST_SIZE)
    p.add_argument("--seed", type=int, default=SEED)
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    df = load_table(args.input, [args.label_col])
    df = df.dropna(subset=[args.label_col]).reset_index(drop=True)

    # stratified by intention so every class appears in both sets
    _, test_idx = stratified_split(df[args.label_col].tolist(), test_size=args.test_size, seed=args.seed)

    split = {"seed": args.seed, "test_size": args.test_size,
             "test_index": sorted(int(i) for i in test_idx)}
    write_json(split, args.output)

    print(f"Frozen split saved to {args.output}")
    print(f"Test set size: {len(split['test_index'])} / {len(df)} total rows")
    return split


if __name__ == "__main__":
    main()
