from __future__ import annotations

import datetime as dt
import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from schemas.resume import ApplicantRecord
from schemas.validation import ensure_exportable

from .layout import render
from .templates import render_latex

logger = logging.getLogger(__name__)


def latexmk_available() -> bool:
    return shutil.which("latexmk") is not None


def export_document(record: ApplicantRecord, *, as_of: Optional[dt.date] = None) -> str:
    """
    Validate the record and render it to LaTeX source for its tier's layout.
    Raises RecordValidationError when the record still has field-level errors.
    """
    ensure_exportable(record)
    layout = render(record, as_of=as_of)
    logger.info("Rendering %s layout with %d sections", layout.kind, len(layout.sections))
    return render_latex(layout)


def compile_latex(latex_content: str, output_dir: Path, output_basename: str) -> Path:
    """
    Compile LaTeX content using latexmk with LuaLaTeX (needed for the Japanese
    document class). Raises if latexmk is missing.
    """
    if not latexmk_available():
        raise RuntimeError("latexmk is not installed. Install TeX Live with LuaTeX-ja.")

    output_dir.mkdir(parents=True, exist_ok=True)
    tex_path = output_dir / f"{output_basename}.tex"
    with open(tex_path, "w", encoding="utf-8") as f:
        f.write(latex_content)

    subprocess.run(
        ["latexmk", "-lualatex", "-interaction=nonstopmode", tex_path.name],
        cwd=output_dir,
        check=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    return output_dir / f"{output_basename}.pdf"


def compile_to_tempfile(latex_content: str, output_basename: str = "rirekisho") -> Optional[Path]:
    if not latexmk_available():
        return None
    tmpdir = Path(tempfile.mkdtemp(prefix="rirekisho_builder_"))
    try:
        return compile_latex(latex_content, tmpdir, output_basename)
    except subprocess.CalledProcessError as exc:  # pragma: no cover - external tool
        logger.error("latexmk failed: %s", exc.stderr)
        raise
