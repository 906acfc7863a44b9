#!/usr/bin/env python3
"""
Command line interface for feediant.
"""

# Standard Library
import argparse
import json
import logging
import sys
from collections import Counter
from pathlib import Path

# local repo modules
from .catalog import DirectoryNode
from .config import AppConfig, load_config, parse_exts, parse_media_paths
from .search import search, strip_picture
from .server import build_catalog, create_app

#============================================


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse CLI arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Index, search and serve a personal media library."
	)
	parser.add_argument(
		"-p",
		"--paths",
		dest="paths",
		nargs="+",
		help="Media roots to scan (overrides MEDIA_PATHS).",
	)
	parser.add_argument(
		"-d",
		"--data-path",
		dest="data_path",
		help="Folder for the metadata cache (overrides DATA_PATH).",
	)
	parser.add_argument(
		"-c",
		"--config",
		dest="config_path",
		help="Optional yaml/json config file.",
	)
	parser.add_argument(
		"-e",
		"--ext",
		dest="extensions",
		action="append",
		help="Index only these extensions (repeatable).",
	)
	parser.add_argument(
		"-v",
		"--verbose",
		dest="verbose",
		action="store_true",
		help="Verbose logging.",
	)
	subparsers = parser.add_subparsers(dest="command", required=True)
	subparsers.add_parser("scan", help="Extract metadata for every file and print a summary.")
	subparsers.add_parser("tree", help="Print the media tree as JSON.")
	search_parser = subparsers.add_parser("search", help="Search the catalog.")
	search_parser.add_argument("query", help="Search text.")
	search_parser.add_argument(
		"-f",
		"--field",
		dest="fields",
		action="append",
		help="Restrict matching to this field (repeatable).",
	)
	search_parser.add_argument(
		"-l",
		"--limit",
		dest="limit",
		type=int,
		help="Maximum number of results.",
	)
	serve_parser = subparsers.add_parser("serve", help="Run the HTTP server.")
	serve_parser.add_argument("--host", dest="host", default="127.0.0.1")
	serve_parser.add_argument("--port", dest="port", type=int, default=3000)
	return parser.parse_args(argv)


#============================================


def build_config(args: argparse.Namespace) -> AppConfig:
	"""
	Build runtime config from args, file and environment.
	"""
	config_path = Path(args.config_path).expanduser() if args.config_path else None
	config = load_config(config_path)
	if args.paths:
		config.media_paths = parse_media_paths(args.paths)
	if args.data_path:
		config.data_path = Path(args.data_path).expanduser()
	exts = parse_exts(args.extensions) if args.extensions else None
	if exts:
		config.supported_extensions = exts
	config.verbose = args.verbose
	return config


#============================================


def _color(text: str, code: str) -> str:
	if sys.stdout.isatty():
		return f"\033[{code}m{text}\033[0m"
	return text


#============================================


def _print_tree(node: DirectoryNode) -> None:
	print(json.dumps(node.to_dict(), indent=2))


#============================================


def main(argv: list[str] | None = None) -> None:
	"""
	Entry point for the CLI.
	"""
	args = parse_args(argv)
	config = build_config(args)
	if config.verbose:
		logging.basicConfig(level=logging.INFO)
	else:
		logging.basicConfig(level=logging.WARNING)
	if args.command == "serve":
		# PIP3 modules
		import uvicorn

		uvicorn.run(create_app(config), host=args.host, port=args.port)
		return
	catalog = build_catalog(config)
	try:
		if args.command == "scan":
			files = catalog.iter_media_files()
			print(f"{_color('[SCAN]', '34')} Found {len(files)} media files.")
			if files:
				ext_counter = Counter(Path(p).suffix.lower().lstrip(".") for p in files)
				summary = ", ".join(f"{ext}:{count}" for ext, count in ext_counter.most_common(8) if ext)
				if summary:
					print(f"{_color('[SCAN]', '34')} Extensions: {summary}")
			records = catalog.list_all()
			failed = len(files) - len(records)
			print(f"{_color('[SCAN]', '34')} Extracted {len(records)} records ({failed} failed).")
		elif args.command == "tree":
			for root in catalog.all_media_with_directories():
				_print_tree(root)
		elif args.command == "search":
			results = search(catalog.list_all(), args.query, fields=args.fields, limit=args.limit)
			print(json.dumps([strip_picture(record) for record in results], indent=2))
	finally:
		catalog.cache.close()


#============================================

if __name__ == "__main__":
	main()
