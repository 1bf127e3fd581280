'''
    This file cleans the raw survey responses and writes the pre-cleaned CSV
    used by every later step.
    Usage: python -m fertility_scripts.clean_responses
'''
import os
import sys
import argparse
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from fertility_scripts.config import RAW_RESPONSES, CLEANED_RESPONSES, ID_COL, TEXT_COL, LABEL_COL
from fertility_scripts.common import load_table, write_json

from fertility_models.preprocess import clean_responses


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Clean raw survey responses.")
    p.add_argument("--input", default=str(RAW_RESPONSES))
    p.add_argument("--output", default=str(CLEANED_RESPONSES))
    p.add_argument("--id-col", default=ID_COL)
    p.add_argument("--text-col", default=TEXT_COL)
    p.add_argument("--label-col", default=LABEL_COL)
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    df = load_table(args.input, [args.id_col, args.text_col])

    clean_df, meta = clean_responses(df, text_col=args.text_col, id_col=args.id_col)
    os.makedirs(os.path.dirname(os.path.abspath(args.output)), exist_ok=True)
    clean_df.to_csv(args.output, index=False, encoding="utf-8")

    print(f"[clean] {meta['n_raw']} raw rows -> {meta['n_clean']} cleaned rows "
          f"(dropped {meta['dropped_empty']} empty, {meta['dropped_duplicate_ids']} duplicate ids)")
    if args.label_col in clean_df.columns:
        print("[clean] intention counts:")
        print(clean_df[args.label_col].value_counts(dropna=False).to_string())

    meta.update({"input": args.input, "output": args.output})
    write_json(meta, os.path.splitext(args.output)[0] + "_meta.json")
    print(f"Cleaned responses saved to {args.output}")
    return meta


if __name__ == "__main__":
    main()
