#!/usr/bin/env python3
"""
Repo-root runner for feediant.

Examples:
	python run_feediant.py --paths ~/Audiobooks scan
	python run_feediant.py --paths ~/Audiobooks search "sanderson" --field author
	python run_feediant.py --paths ~/Audiobooks --data-path ./data serve --port 3000
"""

from __future__ import annotations

import sys
from pathlib import Path


def main() -> None:
	"""
	Run the CLI entrypoint with repo-root import behavior.
	"""
	repo_root = Path(__file__).resolve().parent
	if str(repo_root) not in sys.path:
		sys.path.insert(0, str(repo_root))

	from feediant.cli import main as cli_main

	cli_main()


if __name__ == "__main__":
	main()
