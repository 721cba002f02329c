# semspace/utils.py
"""
Utility Functions

This module provides utility functions for loading, saving and validating
configuration, setting up logging, formatting memory sizes, displaying space
statistics, and checking dependencies.
"""
import json
import logging
import os
import time
from typing import Dict

from semspace.constants import DEFAULT_PARALLEL_DOC_THRESHOLD, LOG_DIR
from semspace.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Define a single default configuration dictionary
DEFAULT_CONFIG = {
    "documents_dir": "documents",
    "corpus_file": None,
    "stopwords_file": "stopwords.txt",
    "special_chars_file": "special_chars.txt",
    "compounds_file": None,
    "use_compounds": False,
    "model": "coals",
    "window_size": None,
    "weighting": "linear",
    "max_words": 15000,
    "max_dimensions": 14000,
    "reduced_dimensions": 0,
    "transform": None,
    "svd_solver": "auto",
    "scale_by_singular_values": False,
    "column_threshold": None,
    "retain_columns": 0,
    "stemming": False,
    "tokenizer": "regexp",
    "processing_mode": "auto",
    "num_workers": None,
    "parallel_threshold": DEFAULT_PARALLEL_DOC_THRESHOLD,
    "statistics_file": None,
    "save_statistics": False,
    "load_statistics": False,
    "log_dir": LOG_DIR,
    "log_level": "INFO"
}

MODELS = ("coals", "hal", "lsa")
TRANSFORMS = ("correlation", "tflogidf", "none")
WEIGHTINGS = ("linear", "uniform")
SVD_SOLVERS = ("auto", "scipy", "randomized")
TOKENIZERS = ("regexp", "punkt")
PROCESSING_MODES = ("auto", "standard", "parallel")


def load_config(config_file='config.json') -> Dict:
    """
    Load configuration from a JSON file, falling back to defaults if not found or invalid.

    Args:
        config_file (str): Path to the configuration file

    Returns:
        dict: The loaded or default configuration
    """
    if not os.path.exists(config_file):
        return _create_default_config(config_file)

    try:
        with open(config_file, 'r') as f:
            config = json.load(f)

        # Merge with defaults to ensure all keys exist
        return {**DEFAULT_CONFIG, **config}
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Error loading config file %s: %s. Using default configuration.", config_file, e)
        return dict(DEFAULT_CONFIG)


def save_config(config: Dict, config_file='config.json'):
    """
    Save the current configuration to a JSON file.

    Args:
        config (dict): The configuration to save
        config_file (str): Path to the configuration file
    """
    try:
        with open(config_file, 'w') as f:
            json.dump(config, f, indent=2)
    except OSError as e:
        logger.error("Error saving configuration to %s: %s", config_file, e)


def _create_default_config(config_file='config.json') -> Dict:
    """
    Create a default configuration file if it doesn't exist.

    Args:
        config_file (str): Path to the configuration file

    Returns:
        dict: The default configuration
    """
    save_config(DEFAULT_CONFIG, config_file)
    logger.info("Created default configuration file: %s", config_file)
    return dict(DEFAULT_CONFIG)


def _check_choice(config, key, choices, allow_none=False):
    value = config.get(key)
    if value is None and allow_none:
        return
    if value not in choices:
        raise ConfigurationError(f"Invalid {key}: {value!r}. Expected one of {list(choices)}")


def _check_non_negative(config, key):
    value = config.get(key)
    if value is None:
        return
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ConfigurationError(f"{key} must be a non-negative integer, got {value!r}")


def validate_config(config: Dict) -> Dict:
    """
    Reject invalid or contradictory settings before any document is read.

    Args:
        config (dict): Merged configuration

    Returns:
        dict: The same configuration

    Raises:
        ConfigurationError: On the first problem found
    """
    _check_choice(config, 'model', MODELS)
    _check_choice(config, 'transform', TRANSFORMS, allow_none=True)
    _check_choice(config, 'weighting', WEIGHTINGS)
    _check_choice(config, 'svd_solver', SVD_SOLVERS)
    _check_choice(config, 'tokenizer', TOKENIZERS)
    _check_choice(config, 'processing_mode', PROCESSING_MODES)

    window_size = config.get('window_size')
    if window_size is not None and (not isinstance(window_size, int) or window_size <= 0):
        raise ConfigurationError(f"window_size must be a positive integer, got {window_size!r}")

    for key in ('max_words', 'max_dimensions', 'reduced_dimensions', 'retain_columns'):
        _check_non_negative(config, key)

    reduced = config.get('reduced_dimensions') or 0
    max_dimensions = config.get('max_dimensions') or 0
    if config.get('model') == 'coals' and reduced and max_dimensions and reduced > max_dimensions:
        raise ConfigurationError(
            f"reduced_dimensions ({reduced}) cannot exceed max_dimensions ({max_dimensions})"
        )

    if config.get('model') == 'hal' and config.get('column_threshold') is not None \
            and (config.get('retain_columns') or 0) > 0:
        raise ConfigurationError("column_threshold and retain_columns cannot both be set")

    if config.get('use_compounds') and not config.get('compounds_file'):
        raise ConfigurationError("use_compounds is set but no compounds_file was given")

    if config.get('load_statistics') or config.get('save_statistics'):
        if config.get('model') not in ('coals', 'lsa'):
            raise ConfigurationError("Statistics can only be saved or loaded for the coals and lsa models")
        if not config.get('statistics_file'):
            raise ConfigurationError("statistics_file is required to save or load statistics")
    if config.get('load_statistics') and config.get('save_statistics'):
        raise ConfigurationError("load_statistics and save_statistics cannot both be set")

    return config


def setup_logging(log_dir=LOG_DIR, level="INFO", name="semspace"):
    """
    Configure root logging to a timestamped file in log_dir and to the console.

    Returns:
        logging.Logger: The application logger
    """
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, f"{name}_{time.strftime('%Y%m%d_%H%M%S')}.log")
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )
    return logging.getLogger(name)


def format_memory_size(size_bytes: int) -> str:
    """
    Format a byte count as a human-readable string.

    Args:
        size_bytes (int): Size in bytes

    Returns:
        str: Formatted size, e.g. '1.50 MB'
    """
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024 or unit == 'GB':
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024


def space_memory_usage(space) -> int:
    total = 0
    for matrix in (space.word_space, space.compound_space):
        if matrix is None:
            continue
        if hasattr(matrix, 'nbytes'):
            total += matrix.nbytes
        else:
            total += matrix.data.nbytes + matrix.indices.nbytes + matrix.indptr.nbytes
    return total


def display_space_statistics(space):
    """
    Display statistics about a processed semantic space.

    Args:
        space (BaseSemanticSpace): The space to describe
    """
    stats = space.statistics()

    print("\n=== Semantic Space Statistics ===")
    print(f"Space: {stats['space_name']}")
    print(f"Documents Processed: {stats['documents_processed']:,}")
    print(f"Words: {stats['word_count']:,}")
    print(f"Compounds Found: {stats['compound_count']:,} "
          f"(of {stats['registered_compounds']:,} registered)")
    if 'vector_length' in stats:
        print(f"Vector Length: {stats['vector_length']:,}")
        print(f"Word Space Shape: {stats['word_space_shape']}")
        print(f"Memory Usage: {format_memory_size(space_memory_usage(space))}")
    print("Top 10 most frequent words:")
    for i, (term, freq) in enumerate(stats['top_words'], 1):
        print(f"    {i}. {term} ({freq:,})")
    print("=" * 55)


def check_dependencies() -> Dict[str, bool]:
    """
    Check which optional and required libraries can be imported.

    Returns:
        dict: Library name -> availability
    """
    available = {}
    for name in ('numpy', 'scipy', 'sklearn', 'nltk'):
        try:
            __import__(name)
            available[name] = True
        except ImportError:
            available[name] = False
    return available


def display_dependencies():
    print("\n=== Dependencies ===")
    for name, ok in check_dependencies().items():
        print(f"{name}: {'available' if ok else 'MISSING'}")
    print("=" * 55)
