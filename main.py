"""
Semantic Space Builder

Builds distributional word vectors (COALS, HAL or term-document/LSA spaces)
from a directory of .txt documents or a one-document-per-line corpus file,
optionally folding registered bigram/trigram compounds into the same space.
"""

import argparse
import logging
import sys

from semspace.exceptions import SemanticSpaceError
from semspace.performance_monitoring import Profiler
from semspace.processing import ProcessorFactory, list_documents, read_corpus_lines
from semspace.space import SpaceFactory
from semspace.text import OrderPreservingTokenizer, load_compounds, load_special_chars, load_stopwords
from semspace.utils import (
    display_dependencies, display_space_statistics, load_config, setup_logging, validate_config
)


def build_parser(config):
    parser = argparse.ArgumentParser(description='Build a semantic space from a text corpus.')
    parser.add_argument('--config', default='config.json',
                        help='Path to configuration file')
    parser.add_argument('--documents_dir', default=config['documents_dir'],
                        help=f"Directory containing .txt documents (default: {config['documents_dir']})")
    parser.add_argument('--corpus_file', default=config['corpus_file'],
                        help='File with one document per line, used instead of documents_dir')
    parser.add_argument('--stopwords_file', default=config['stopwords_file'],
                        help=f"File containing stopwords (default: {config['stopwords_file']})")
    parser.add_argument('--special_chars_file', default=config['special_chars_file'],
                        help=f"File containing special characters to remove (default: {config['special_chars_file']})")
    parser.add_argument('--compounds_file', default=config['compounds_file'],
                        help='File with one bigram/trigram compound per line')
    parser.add_argument('--use_compounds', action='store_true', default=config['use_compounds'],
                        help='Build vectors for the compounds in compounds_file')
    parser.add_argument('--model', choices=['coals', 'hal', 'lsa'], default=config['model'],
                        help=f"Semantic space model (default: {config['model']})")
    parser.add_argument('--window_size', type=int, default=config['window_size'],
                        help='Context window size (default: 4 for coals, 5 for hal)')
    parser.add_argument('--weighting', choices=['linear', 'uniform'], default=config['weighting'],
                        help=f"Distance weighting inside the window (default: {config['weighting']})")
    parser.add_argument('--max_words', type=int, default=config['max_words'],
                        help=f"COALS: words kept as rows, 0 keeps all (default: {config['max_words']})")
    parser.add_argument('--max_dimensions', type=int, default=config['max_dimensions'],
                        help=f"COALS: words kept as features, 0 keeps all (default: {config['max_dimensions']})")
    parser.add_argument('--reduced_dimensions', type=int, default=config['reduced_dimensions'],
                        help='SVD rank, 0 disables the SVD')
    parser.add_argument('--transform', choices=['correlation', 'tflogidf', 'none'], default=config['transform'],
                        help='Matrix transform (default depends on the model)')
    parser.add_argument('--svd_solver', choices=['auto', 'scipy', 'randomized'], default=config['svd_solver'],
                        help=f"SVD implementation (default: {config['svd_solver']})")
    parser.add_argument('--scale_by_singular_values', action='store_true',
                        default=config['scale_by_singular_values'],
                        help='Use U*Sigma instead of U as the reduced word space')
    parser.add_argument('--column_threshold', type=float, default=config['column_threshold'],
                        help='HAL: keep columns whose entropy reaches this threshold')
    parser.add_argument('--retain_columns', type=int, default=config['retain_columns'],
                        help='HAL: keep this many highest-entropy columns')
    parser.add_argument('--stemming', action='store_true', default=config['stemming'],
                        help='Apply the Porter stemmer')
    parser.add_argument('--tokenizer', choices=['regexp', 'punkt'], default=config['tokenizer'],
                        help=f"Tokenizer (default: {config['tokenizer']})")
    parser.add_argument('--processing_mode', choices=['auto', 'standard', 'parallel'],
                        default=config['processing_mode'],
                        help=f"Document processing mode (default: {config['processing_mode']})")
    parser.add_argument('--num_workers', type=int, default=config['num_workers'],
                        help='Worker threads for parallel processing')
    parser.add_argument('--parallel_threshold', type=int, default=config['parallel_threshold'],
                        help=f"Document count that selects parallel processing (default: {config['parallel_threshold']})")
    parser.add_argument('--statistics_file', default=config['statistics_file'],
                        help='COALS or LSA statistics file to save to or load from')
    parser.add_argument('--save_statistics', action='store_true', default=config['save_statistics'],
                        help='Save COALS or LSA statistics after processing')
    parser.add_argument('--load_statistics', action='store_true', default=config['load_statistics'],
                        help='Project unseen words and compounds into a saved COALS or LSA space')
    parser.add_argument('--log_dir', default=config['log_dir'],
                        help=f"Directory for log files (default: {config['log_dir']})")
    parser.add_argument('--log_level', default=config['log_level'],
                        help=f"Logging level (default: {config['log_level']})")
    parser.add_argument('--report_file', default=None,
                        help='Write the timing report to this file')
    parser.add_argument('--check_deps', action='store_true',
                        help='Check and display available dependencies')
    return parser


def parse_arguments(argv=None):
    """
    Parse command-line arguments on top of the configuration file settings.

    Values from --config replace the defaults; flags given on the command
    line replace both.

    Returns:
        argparse.Namespace: The parsed command-line arguments with config file integration
    """
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument('--config', default='config.json')
    known, _ = pre_parser.parse_known_args(argv)

    config = load_config(known.config)
    parser = build_parser(config)
    return parser.parse_args(argv)


def load_documents(args):
    if args.corpus_file:
        return read_corpus_lines(args.corpus_file)
    return list_documents(args.documents_dir)


def main(argv=None):
    """
    Main function to build and report on a semantic space.
    """
    args = parse_arguments(argv)
    logger = setup_logging(args.log_dir, args.log_level)

    if args.check_deps:
        display_dependencies()

    config = validate_config(vars(args))

    profiler = Profiler()
    profiler.start_global_timer()

    tokenizer = OrderPreservingTokenizer(
        stopwords=load_stopwords(args.stopwords_file),
        special_chars=load_special_chars(args.special_chars_file),
        stem=args.stemming,
        mode=args.tokenizer
    )

    compounds = None
    if args.use_compounds:
        with profiler.timer("Compound Loading"):
            compounds = load_compounds(args.compounds_file, tokenizer)

    space = SpaceFactory.create_space(config, tokenizer, compounds, profiler)

    documents = load_documents(args)
    logger.info("Found %d documents", len(documents))

    processor = ProcessorFactory.create_processor(
        space,
        mode=args.processing_mode,
        num_workers=args.num_workers,
        parallel_threshold=args.parallel_threshold,
        doc_count=len(documents),
        profiler=profiler
    )
    processor.run(documents)

    if args.save_statistics:
        with profiler.timer("Statistics Saving"):
            space.save_statistics(args.statistics_file)

    profiler.pause_global_timer()
    display_space_statistics(space)
    print(profiler.generate_report(space.document_count, len(space.word_vocabulary), args.report_file))
    print(f"Total Execution Time: {profiler.get_global_time():.4f}s")
    return space


if __name__ == "__main__":
    try:
        main()
    except (SemanticSpaceError, ValueError, OSError) as e:
        logging.getLogger('semspace').error("%s", e)
        sys.exit(1)
