from __future__ import annotations

import pathlib
import re
from typing import Dict

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from policy.tiers import LayoutKind
from schemas.layout import DocumentLayout

TEMPLATE_DIR = pathlib.Path(__file__).resolve().parent.parent / "templates"

TEMPLATE_FOR_LAYOUT = {
    LayoutKind.STANDARD.value: "rirekisho",
    LayoutKind.EXTENDED.value: "biodata",
}

_TEX_SPECIALS = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}
_TEX_RE = re.compile("|".join(re.escape(ch) for ch in _TEX_SPECIALS))


def tex_escape(value) -> str:
    text = "" if value is None else str(value)
    escaped = _TEX_RE.sub(lambda m: _TEX_SPECIALS[m.group()], text)
    return escaped.replace("\n", r"\newline ")


def list_templates() -> Dict[str, pathlib.Path]:
    return {p.stem: p for p in TEMPLATE_DIR.glob("*.tex")}


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        undefined=StrictUndefined,
        block_start_string="\\BLOCK{",
        block_end_string="}",
        variable_start_string="{{",
        variable_end_string="}}",
        comment_start_string="\\#{",
        comment_end_string="}",
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["tex"] = tex_escape
    return env


def render_template(template_name: str, context: dict) -> str:
    templates = list_templates()
    if template_name not in templates:
        raise ValueError(f"Template {template_name} not found. Available: {list(templates)}")
    template = _environment().get_template(f"{template_name}.tex")
    return template.render(**context)


def render_latex(layout: DocumentLayout) -> str:
    """Render a document layout through the LaTeX template for its kind."""
    return render_template(TEMPLATE_FOR_LAYOUT[layout.kind], {"layout": layout})
