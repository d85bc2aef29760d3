"""
Indexer configuration
=====================

Loads paths and extraction settings from a JSON config file or
environment variables.

Priority: overrides > config file > environment > defaults

Usage:
    from doc_indexer.config import load_config

    config = load_config()                              # discovered file / env
    config = load_config("indexer_config.json")         # explicit file
    config = load_config(stopwords_path="stop.txt")     # with override
"""

import os
import json
import sys
from dataclasses import dataclass, fields
from typing import Optional, Dict, Any

from .extractor import ExtractorConfig


# =============================================================================
# CONFIG FILE PATHS
# =============================================================================

DEFAULT_CONFIG_PATHS = [
    "./indexer_config.json",
    "./config/indexer_config.json",
    os.path.expanduser("~/.config/doc_indexer.json"),
]

# Environment variable -> config field
ENV_VARIABLES = {
    "INDEXER_STOPWORDS": "stopwords_path",
    "INDEXER_LEMMAS": "lemmas_path",
    "INDEXER_DICTIONARY": "dictionary_path",
    "INDEXER_STORE": "store_path",
    "INDEXER_SHORT_WORD_LENGTH": "short_word_length",
    "INDEXER_TITLE_WEIGHT": "title_weight",
    "INDEXER_DESCRIPTION_WEIGHT": "description_weight",
    "INDEXER_WORKERS": "max_workers",
}


@dataclass
class IndexerConfig:
    """Everything the pipeline needs to start"""
    stopwords_path: Optional[str] = None     # mandatory at pipeline start
    lemmas_path: Optional[str] = None        # optional binary lemma artifact
    dictionary_path: Optional[str] = None    # optional binary frequency artifact
    store_path: str = "./index/keywords.json"
    short_word_length: int = 2
    title_weight: int = 2
    description_weight: int = 2
    max_workers: Optional[int] = None

    def extractor_config(self) -> ExtractorConfig:
        return ExtractorConfig(
            short_word_length=self.short_word_length,
            title_weight=self.title_weight,
            description_weight=self.description_weight,
            max_workers=self.max_workers
        )

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


_INT_FIELDS = {"short_word_length", "title_weight", "description_weight", "max_workers"}


# =============================================================================
# CONFIG LOADING
# =============================================================================

def find_config_file() -> Optional[str]:
    """Find config file in common locations."""
    env_path = os.environ.get("INDEXER_CONFIG_PATH", "")
    if env_path and os.path.exists(env_path):
        return env_path

    for path in DEFAULT_CONFIG_PATHS:
        if path and os.path.exists(path):
            return path
    return None


def load_config_file(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load JSON config file.

    Returns empty dict if file not found (env/defaults are used).
    Malformed files are reported and ignored.
    """
    if config_path is None:
        config_path = find_config_file()

    if config_path is None:
        return {}

    if not os.path.exists(config_path):
        print(f"Warning: Config file not found: {config_path}", file=sys.stderr)
        return {}

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {config_path}: {e}", file=sys.stderr)
        return {}
    except OSError as e:
        print(f"Error: Failed to read {config_path}: {e}", file=sys.stderr)
        return {}

    if not isinstance(data, dict):
        print(f"Error: {config_path} must hold a JSON object", file=sys.stderr)
        return {}
    return data


def _from_environment() -> Dict[str, Any]:
    values = {}
    for variable, name in ENV_VARIABLES.items():
        value = os.environ.get(variable)
        if value:
            values[name] = value
    return values


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(IndexerConfig)}
    result = {}
    for name, value in values.items():
        if name not in known:
            print(f"Warning: Unknown config key ignored: {name}", file=sys.stderr)
            continue
        if name in _INT_FIELDS and value is not None:
            value = int(value)
        result[name] = value
    return result


def load_config(config_path: Optional[str] = None, **overrides) -> IndexerConfig:
    """
    Build an IndexerConfig.

    Args:
        config_path: Path to config JSON file (discovered when None)
        **overrides: Field values taking precedence over everything else;
            None values are ignored

    Returns:
        IndexerConfig
    """
    values = _coerce(_from_environment())
    values.update(_coerce(load_config_file(config_path)))
    values.update(_coerce({k: v for k, v in overrides.items() if v is not None}))
    return IndexerConfig(**values)
