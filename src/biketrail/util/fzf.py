# biketrail/util/fzf.py
"""
Pick GPX rides interactively with `fzf`.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from shutil import which
from typing import Optional

from biketrail.errors import BikeTrailError, FzfNotFoundError


def _label(path: Path, root: Optional[Path]) -> str:
    # Rides under a dated folder often share a file name, so show the subpath
    if root is not None:
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            pass
    return path.name


def fzf_select_paths(
        paths: list[Path], *,
        header: str,
        multi: bool = True,
        root: Optional[Path] = None,
) -> list[Path]:
    """
    Let the user pick from `paths`; returns resolved paths.

    Entries are listed by their path relative to `root` (file name when
    `root` is None or does not contain them). No match (exit 1) and an
    aborted selection (Esc / Ctrl-C, exit 130) return an empty list.
    """
    if not which("fzf"):
        raise FzfNotFoundError("fzf not found on PATH")

    # "label<TAB>fullpath"; fzf shows and searches the label only
    input_text = "".join(f"{_label(p, root)}\t{p}\n" for p in paths)

    cmd = [
        "fzf",
        "--delimiter=\t",
        "--nth=1",
        "--with-nth=1",
        "--height=60%",
        "--layout=reverse",
        "--border",
        "--header", header,
    ]
    if multi:
        cmd.append("--multi")

    proc = subprocess.run(
        cmd,
        input=input_text.encode(),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    if proc.returncode not in (0, 1, 130):
        raise BikeTrailError(f"fzf failed ({proc.returncode}): {proc.stderr.decode(errors='replace').strip()}")

    return [
        Path(line.partition("\t")[2] or line).expanduser().resolve()
        for line in proc.stdout.decode().splitlines()
        if line.strip()
    ]
