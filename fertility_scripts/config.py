from pathlib import Path

# DATA FILE
DATA_DIR = Path("data")

RAW_DIR = DATA_DIR / "raw"
CLEANED_DIR = DATA_DIR / "cleaned"

RAW_RESPONSES = RAW_DIR / "responses.csv"
CLEANED_RESPONSES = CLEANED_DIR / "responses_clean.csv"
STOPWORD_FILE = DATA_DIR / "stopwords.txt"
SPLIT_FILE = DATA_DIR / "split.json"
FEATURES_FILE = DATA_DIR / "features.csv"

# COLUMNS
ID_COL = "id"
TEXT_COL = "response"
CLEAN_COL = "clean_text"
LABEL_COL = "intention"

SEED = 42

# RESULT FILE
EXPLORE_OUTPUT = "results/explore"
TOPICS_OUTPUT = "results/topics"
CLASSIFIER_OUTPUT = "results/classifier"
PIC_DIR = "results/figures"
