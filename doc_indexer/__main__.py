#!/usr/bin/env python3
"""
Document Indexer CLI - Command-line interface for compiling, indexing and searching

Usage:
    # Compile the lemma dictionary from the GLÀFF
    python -m doc_indexer compile-lemmas glaff.txt -o lemmas.npz

    # Compile the spelling dictionary from a text corpus
    python -m doc_indexer compile-frequencies ./corpus -s stopwords.txt -o dictionary.npz

    # Index a directory
    python -m doc_indexer index -s stopwords.txt -g lemmas.npz -d dictionary.npz ./docs

    # Search the index
    python -m doc_indexer search -s stopwords.txt "chevaux sauvages"

    # Show statistics of the index
    python -m doc_indexer stats -s stopwords.txt
"""

import argparse
import json
import sys
from pathlib import Path

from .config import load_config
from .content_store import digest_and_key
from .errors import IndexerError
from .frequency import compile_frequency_dictionary
from .lemmas import compile_lemma_dictionary
from .pipeline import IndexingPipeline


def _pipeline(args) -> IndexingPipeline:
    config = load_config(
        args.config,
        stopwords_path=getattr(args, 'stop_words', None),
        lemmas_path=getattr(args, 'glaff', None),
        dictionary_path=getattr(args, 'dictionary', None),
        store_path=getattr(args, 'store', None),
        max_workers=getattr(args, 'workers', None)
    )
    return IndexingPipeline(config, verbose=getattr(args, 'verbose', False))


def cmd_compile_lemmas(args):
    """Compile a lexicon into a lemma artifact"""
    report = compile_lemma_dictionary(args.file, args.output, verbose=True)
    print(f"Skipped records: {report.records_skipped}")
    return 0


def cmd_compile_frequencies(args):
    """Compile a text corpus into a frequency artifact"""
    extensions = None
    if args.extensions:
        extensions = [ext if ext.startswith('.') else f'.{ext}' for ext in args.extensions.split(',')]

    report = compile_frequency_dictionary(
        args.directory,
        args.stop_words,
        args.output,
        max_workers=args.workers,
        extensions=extensions,
        verbose=True
    )
    print(f"Skipped files: {report.files_skipped}")
    return 0


def cmd_index(args):
    """Index files from a directory"""
    pipeline = _pipeline(args)

    def progress(file_path, current, total):
        if current % 10 == 0 or current == total:
            print(f"  [{current}/{total}] {Path(file_path).name}")

    print(f"\nIndexing directory: {args.directory}")
    stats = pipeline.index_directory(
        args.directory,
        recursive=not args.no_recursive,
        max_workers=args.workers,
        progress_callback=progress if args.verbose else None
    )

    print(f"\n{'='*60}")
    print("INDEXING COMPLETE")
    print(f"{'='*60}")
    print(f"Files processed: {stats.files_processed}")
    print(f"Duplicates skipped: {stats.duplicates}")
    print(f"Files failed: {stats.files_failed}")
    print(f"Keyword records: {stats.total_keywords}")
    print(f"Time: {stats.processing_time_seconds:.2f}s")

    if stats.outcomes:
        print("\nToken resolution:")
        for outcome, count in sorted(stats.outcomes.items()):
            print(f"  {outcome}: {count}")

    if stats.errors and args.verbose:
        print(f"\nErrors ({len(stats.errors)}):")
        for err in stats.errors[:10]:
            print(f"  - {err}")

    pipeline.save()
    print(f"\nSaved index to: {pipeline.store.path}")
    return 0


def cmd_search(args):
    """Search the index"""
    pipeline = _pipeline(args)
    query = ' '.join(args.query)
    result = pipeline.search(query)

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return 0

    if result.using_suggestion:
        print(f"No result for '{query}', showing results for '{result.spelling_suggestion}'")

    print(f"\nFound {len(result.results)} results:\n")
    for rank, hit in enumerate(result.results[:args.top_k], 1):
        print(f"[{rank}] {hit.hits} hits  {hit.document.name}")
        if hit.document.title:
            print(f"    {hit.document.title}")
    return 0


def cmd_keywords(args):
    """List the keywords of a document"""
    pipeline = _pipeline(args)
    for record in pipeline.store.document_keywords(args.document)[:args.top_k]:
        print(f"{record.occurrences:6d}  x{record.weight_modifier}  {record.word}")
    return 0


def cmd_stats(args):
    """Show index statistics"""
    pipeline = _pipeline(args)
    pipeline.print_statistics()
    return 0


def cmd_spell(args):
    """Spell-correct words"""
    pipeline = _pipeline(args)
    for word in args.words:
        print(f"{word} -> {pipeline.spelling(word)}")
    return 0


def cmd_digest(args):
    """Show digest and storage key of files"""
    for file_path in args.files:
        path = Path(file_path)
        document_digest = digest_and_key(path.read_bytes(), path.name)
        print(f"{document_digest.hexdigest}  {document_digest.storage_key}")
    return 0


def _add_runtime_options(parser):
    parser.add_argument('--config', help='Path to a JSON config file')
    parser.add_argument('--stop-words', '-s', help='Stop-word list (one word per line)')
    parser.add_argument('--glaff', '-g', help='Compiled lemma dictionary')
    parser.add_argument('--dictionary', '-d', help='Compiled frequency dictionary')
    parser.add_argument('--store', help='Keyword store JSON file')


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Document Indexer - compile dictionaries, index and search documents',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Compile commands
    lemmas_parser = subparsers.add_parser('compile-lemmas', help='Compile the lemma dictionary')
    lemmas_parser.add_argument('file', help='Pipe-delimited lexicon (GLÀFF)')
    lemmas_parser.add_argument('--output', '-o', required=True, help='Output artifact')

    freq_parser = subparsers.add_parser('compile-frequencies', help='Compile the spelling dictionary')
    freq_parser.add_argument('directory', help='Directory of corpus text files')
    freq_parser.add_argument('--stop-words', '-s', required=True, help='Stop-word list')
    freq_parser.add_argument('--output', '-o', required=True, help='Output artifact')
    freq_parser.add_argument('--extensions', '-e', default='.txt',
                             help='Comma-separated corpus file extensions')
    freq_parser.add_argument('--workers', '-w', type=int, help='Number of parallel workers')

    # Index command
    index_parser = subparsers.add_parser('index', help='Index files from a directory')
    index_parser.add_argument('directory', help='Directory to index')
    _add_runtime_options(index_parser)
    index_parser.add_argument('--no-recursive', action='store_true',
                              help='Do not recurse into subdirectories')
    index_parser.add_argument('--workers', '-w', type=int, help='Number of parallel workers')
    index_parser.add_argument('--verbose', action='store_true', help='Verbose output')

    # Search command
    search_parser = subparsers.add_parser('search', help='Search the index')
    search_parser.add_argument('query', nargs='+', help='Search query')
    _add_runtime_options(search_parser)
    search_parser.add_argument('--top-k', '-k', type=int, default=10, help='Number of results')
    search_parser.add_argument('--json', action='store_true', help='Print the raw result as JSON')

    # Keywords command
    keywords_parser = subparsers.add_parser('keywords', help='List keywords of a document')
    keywords_parser.add_argument('document', help='Document name')
    _add_runtime_options(keywords_parser)
    keywords_parser.add_argument('--top-k', '-k', type=int, default=25, help='Number of keywords')

    # Stats command
    stats_parser = subparsers.add_parser('stats', help='Show index statistics')
    _add_runtime_options(stats_parser)

    # Spell command
    spell_parser = subparsers.add_parser('spell', help='Spell-correct words')
    spell_parser.add_argument('words', nargs='+', help='Words to correct')
    _add_runtime_options(spell_parser)

    # Digest command
    digest_parser = subparsers.add_parser('digest', help='Show digest and storage key of files')
    digest_parser.add_argument('files', nargs='+', help='Files to digest')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        'compile-lemmas': cmd_compile_lemmas,
        'compile-frequencies': cmd_compile_frequencies,
        'index': cmd_index,
        'search': cmd_search,
        'keywords': cmd_keywords,
        'stats': cmd_stats,
        'spell': cmd_spell,
        'digest': cmd_digest
    }

    try:
        return commands[args.command](args)
    except (IndexerError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
