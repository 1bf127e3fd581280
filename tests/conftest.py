import matplotlib
matplotlib.use("Agg")

import pandas as pd
import pytest

YES = [
    "I love children and would be happy to have two more kids",
    "We definitely want a baby next year, our family feels ready",
    "Happy to grow our family, children bring joy",
    "I want another child, a sibling for my son",
    "Yes! We hope for a big family with three kids",
    "Our plan is a baby soon, we love kids",
    "Definitely want children, family is everything",
    "We are excited to have a baby and grow the family",
]
NO = [
    "Too expensive, childcare costs and housing are a worry",
    "No more kids, money is tight and work is stressful",
    "I hate the idea of more debt, we cannot afford another child",
    "Work and career come first, no time for children",
    "Housing costs are too high, we are worried about money",
    "Our finances are stretched, childcare is expensive",
    "No, my health and age make it hard",
    "The cost of living is a worry, so no more kids",
]
UNSURE = [
    "Not sure yet, it depends on my partner and our jobs",
    "Maybe later, we have not decided",
    "Undecided, it depends on money and health",
    "I am unsure, perhaps when work is stable",
    "Hard to say, it depends on my partner",
    "We might, but not sure about timing",
    "Depends on housing and whether we can afford it",
    "Possibly, we have not talked about it much",
]


def _survey_rows():
    rows = []
    i = 1
    for label, texts in (("yes", YES), ("no", NO), ("unsure", UNSURE)):
        for j, t in enumerate(texts):
            rows.append({"id": i, "response": t, "age": 25 + (i % 15), "sex": "F" if j % 2 else "M",
                         "intention": label})
            i += 1
    return rows


@pytest.fixture
def survey_df():
    return pd.DataFrame(_survey_rows())


@pytest.fixture
def raw_survey_df():
    df = pd.DataFrame(_survey_rows())
    extra = pd.DataFrame([
        {"id": 100, "response": None, "age": 30, "sex": "F", "intention": "yes"},
        {"id": 101, "response": "  ?!  123 ", "age": 31, "sex": "M", "intention": "no"},
        {"id": 1, "response": "duplicate id row", "age": 32, "sex": "F", "intention": "no"},
    ])
    return pd.concat([df, extra], ignore_index=True)


@pytest.fixture
def lexicon_file(tmp_path):
    # VADER lexicon format: word<TAB>mean<TAB>sd<TAB>ratings; no trailing newline
    lines = [
        "love\t3.2\t0.4\t[3, 3, 4]",
        "happy\t2.7\t0.6\t[3, 2, 3]",
        "joy\t2.8\t0.5\t[3, 3, 2]",
        "excited\t2.2\t0.6\t[2, 2, 3]",
        "hope\t1.9\t0.5\t[2, 2, 2]",
        "hate\t-2.7\t0.6\t[-3, -2, -3]",
        "worry\t-1.9\t0.5\t[-2, -2, -2]",
        "worried\t-1.8\t0.5\t[-2, -2, -1]",
        "stressful\t-1.7\t0.5\t[-2, -1, -2]",
        "debt\t-1.5\t0.5\t[-1, -2, -2]",
    ]
    path = tmp_path / "lexicon.txt"
    path.write_text("\n".join(lines), encoding="utf-8")
    return str(path)


@pytest.fixture
def stopword_file(tmp_path):
    words = ["# test list", "", "i", "a", "and", "the", "to", "is", "are", "we", "our", "my",
             "of", "for", "it", "be", "have", "on", "about", "with", "so", "not", "no", "yes"]
    path = tmp_path / "stopwords.txt"
    path.write_text("\n".join(words) + "\n", encoding="utf-8")
    return str(path)
