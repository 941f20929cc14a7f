# Load/store of the corpus JSON file.
# Loading is tolerant: any failure yields an empty corpus instead of raising.

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from .models import Corpus

logger = logging.getLogger(__name__)


def load_corpus(path: Union[str, Path]) -> Corpus:
    """Read the corpus at ``path``; missing or malformed files give an empty corpus."""
    path = Path(path)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.error(f"Corpus file not found: {path}")
        return Corpus.empty()
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to read corpus {path}: {e}")
        return Corpus.empty()
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse corpus {path}: {e}")
        return Corpus.empty()

    if not isinstance(data, dict):
        logger.error(f"Corpus {path} is not a JSON object")
        return Corpus.empty()

    corpus = Corpus.from_dict(data)
    logger.info(f"Loaded corpus from {path}: {len(corpus.pages)} pages, {len(corpus.chunks)} chunks")
    return corpus


def save_corpus(corpus: Corpus, path: Union[str, Path]) -> Path:
    """Write the corpus as pretty JSON, replacing any previous file atomically."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=path.name, suffix='.tmp', dir=path.parent)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(corpus.to_dict(), f, indent=2, ensure_ascii=False)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise

    logger.info(f"Saved corpus to {path}")
    return path
