"""File collection utilities: turn paths on disk into upload candidates."""
from pathlib import Path
from typing import Iterable, List

from .models import Candidate


class FileCollector:
    """Collects files from paths and folders."""

    @staticmethod
    def collect_files(paths: Iterable[Path]) -> List[Path]:
        """
        Expand paths into files, keeping the order they were given.

        Folders contribute their files recursively, sorted by path; hidden
        files inside folders are skipped.

        Args:
            paths: Files and/or folders

        Returns:
            List of file paths
        """
        files = []
        for path in paths:
            path = Path(path)
            if path.is_dir():
                files.extend(
                    sorted(
                        item for item in path.rglob("*")
                        if item.is_file() and not item.name.startswith(".")
                    )
                )
            elif path.is_file():
                files.append(path)
            else:
                raise FileNotFoundError(f"not a file or folder: {path}")
        return files

    @classmethod
    def collect_candidates(cls, paths: Iterable[Path]) -> List[Candidate]:
        return [Candidate.from_path(path) for path in cls.collect_files(paths)]
