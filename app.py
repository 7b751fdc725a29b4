import datetime as dt
import json
import logging
import os
import tempfile
from typing import List, Optional, Tuple

import gradio as gr
from pydantic import ValidationError

from llm.client import CollaboratorError, MissingCredentialError, build_client
from llm.credentials import clear_api_key, load_api_key, resolve_api_key, save_api_key
from llm.pipeline import analyze_gaps, extract_cv, stream_chat, transliterate_name
from policy.evaluator import evaluate
from render.latex import compile_to_tempfile, export_document, latexmk_available
from resume_parser.parser import extract_cv_text
from schemas.resume import ApplicantRecord, VisaTier
from schemas.samples import sample_record
from schemas.validation import RecordValidationError, validate_record
from store.record_store import RecordStore, StaleRecordError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("rirekisho_builder")

APP_TITLE = "Rirekisho Builder"
OPENAI_MODELS = ["gpt-4o-mini", "gpt-4o", "gpt-4.1-mini"]
HF_MODELS = [
    "Qwen/Qwen2.5-72B-Instruct",
    "meta-llama/Llama-3.1-8B-Instruct",
    "HuggingFaceH4/zephyr-7b-beta",
]
HF_PROVIDER_LABEL = "Hugging Face (Inference API)"
TIMEOUT = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
SUPERSEDED_MESSAGE = "The record changed while the assistant was working; the response was discarded. Please retry."


def _provider_defaults(provider: str) -> Tuple[list, str, str]:
    if provider == HF_PROVIDER_LABEL:
        return HF_MODELS, HF_MODELS[0], "Hugging Face Token"
    return OPENAI_MODELS, OPENAI_MODELS[0], "OpenAI API Key"


def _store(state: Optional[RecordStore]) -> RecordStore:
    return state if state is not None else RecordStore()


def _record_text(record: ApplicantRecord) -> str:
    return json.dumps(record.to_wire(), ensure_ascii=False, indent=2)


def _client(provider: str, api_key: str, model: str, save_key: bool):
    key = resolve_api_key(provider, api_key)
    if save_key and api_key:
        save_api_key(api_key)
    return build_client(provider, key, model, timeout=TIMEOUT)


def _format_gaps(record: ApplicantRecord) -> str:
    report = evaluate(record)
    if report.is_complete:
        # Completeness covers the tier's required fields only; export also checks formats and lengths.
        errors = validate_record(record)
        if not errors:
            return "All required fields are complete."
        lines = ["All required fields are complete, but export still needs:"]
        lines.extend(f"- {e.path}: {e.message}" for e in errors)
        return "\n".join(lines)
    lines = [f"{len(report.gaps)} fields need attention:"]
    for gap in report.gaps:
        lines.append(f"[{gap.importance.value}] {gap.section_label} / {gap.field_path}: {gap.prompt_question}")
    return "\n".join(lines)


def apply_record_json(state, text: str):
    store = _store(state)
    try:
        store.load(ApplicantRecord.model_validate(json.loads(text or "{}")))
    except (json.JSONDecodeError, ValidationError) as exc:
        return store, text, f"Could not apply record: {exc}"
    record = store.snapshot()
    return store, _record_text(record), _format_gaps(record)


def load_sample(state, tier: str):
    store = _store(state)
    record = store.load(sample_record(VisaTier(tier)))
    return store, _record_text(record), _format_gaps(record)


def change_tier(state, tier: str):
    store = _store(state)
    record = store.set_tier(tier)
    return store, _record_text(record), _format_gaps(record)


def check_completeness(state):
    return _format_gaps(_store(state).snapshot())


def run_ai_analysis(state, api_key: str, provider: str, model: str, save_key: bool) -> str:
    store = _store(state)
    token = store.token()
    record = store.snapshot()
    try:
        client = _client(provider, api_key, model, save_key)
    except MissingCredentialError as exc:
        return f"API key required: {exc}"
    result = analyze_gaps(client, record)
    if store.token() != token:
        logger.info("Discarding gap analysis for superseded revision %s", token.revision)
        return SUPERSEDED_MESSAGE
    if not result.available:
        return result.message
    analysis = result.analysis
    if analysis.is_complete:
        return "The assistant found no missing information."
    lines = [f"[{m.importance.value}] {m.section} / {m.field}: {m.question}" for m in analysis.missing_fields]
    if analysis.suggestions:
        lines.append("")
        lines.append("Suggestions:")
        lines.extend(f"- {s}" for s in analysis.suggestions)
    return "\n".join(lines)


def upload_cv(state, pdf_file, api_key: str, provider: str, model: str, save_key: bool):
    store = _store(state)
    if pdf_file is None:
        return store, _record_text(store.snapshot()), "Please upload a CV PDF."
    token = store.token()
    try:
        text = extract_cv_text(pdf_file if isinstance(pdf_file, (bytes, bytearray)) else str(pdf_file))
        logger.info("Extracted CV text using %s", text.method)
        client = _client(provider, api_key, model, save_key)
        parsed = extract_cv(client, text.raw_text)
        record = store.merge_parsed_cv(parsed, token=token)
    except StaleRecordError as exc:
        logger.info("Discarding CV extraction: %s", exc)
        return store, _record_text(store.snapshot()), SUPERSEDED_MESSAGE
    except MissingCredentialError as exc:
        return store, _record_text(store.snapshot()), f"API key required: {exc}"
    except (ValueError, CollaboratorError) as exc:
        return store, _record_text(store.snapshot()), f"Failed to parse CV: {exc}"
    confidence = parsed.confidence
    status = (
        "CV merged (appended to current data). Confidence: "
        f"personal {confidence.personal_info:.0%}, education {confidence.education:.0%}, "
        f"work {confidence.work_history:.0%}, skills {confidence.skills:.0%}"
    )
    return store, _record_text(record), status


def transliterate(state, name: str, source_language: str, api_key: str, provider: str, model: str, save_key: bool):
    store = _store(state)
    token = store.token()
    try:
        client = _client(provider, api_key, model, save_key)
        result = transliterate_name(client, name, source_language or "English")
    except MissingCredentialError as exc:
        return store, _record_text(store.snapshot()), f"API key required: {exc}"
    except (ValueError, CollaboratorError) as exc:
        return store, _record_text(store.snapshot()), f"Failed to transliterate: {exc}"
    try:
        record = store.update_section("personalInfo", {"katakanaName": result.katakana}, token=token)
    except StaleRecordError as exc:
        logger.info("Discarding transliteration: %s", exc)
        return store, _record_text(store.snapshot()), SUPERSEDED_MESSAGE
    message = f"{result.katakana} ({result.pronunciation})"
    if result.notes:
        message += f"\n{result.notes}"
    return store, _record_text(record), message


def chat(message: str, history: List[dict], state, api_key: str, provider: str, model: str, save_key: bool):
    history = list(history or []) + [{"role": "user", "content": message}]
    try:
        client = _client(provider, api_key, model, save_key)
    except MissingCredentialError as exc:
        yield history + [{"role": "assistant", "content": f"API key required: {exc}"}]
        return
    reply = ""
    try:
        for chunk in stream_chat(client, history, _store(state).snapshot()):
            reply += chunk
            yield history + [{"role": "assistant", "content": reply}]
    except CollaboratorError as exc:
        yield history + [{"role": "assistant", "content": f"{reply}\n\n(Assistant unavailable: {exc})"}]


def export(state):
    record = _store(state).snapshot()
    try:
        latex = export_document(record, as_of=dt.date.today())
    except RecordValidationError as exc:
        lines = ["Fix these fields before exporting:"] + [f"- {e.path}: {e.message}" for e in exc.errors]
        return None, None, "\n".join(lines)

    with tempfile.NamedTemporaryFile(delete=False, suffix=".tex") as tex_tmp:
        tex_tmp.write(latex.encode("utf-8"))
        tex_path = tex_tmp.name

    pdf_path = None
    status = "LaTeX exported."
    if latexmk_available():
        try:
            pdf_out = compile_to_tempfile(latex)
            pdf_path = str(pdf_out) if pdf_out else None
            status = "LaTeX and PDF exported."
        except Exception as exc:  # pragma: no cover - external tool
            status = f"latexmk failed: {exc}"
    else:
        status += " latexmk not installed; PDF export disabled."
    return tex_path, pdf_path, status


def build_ui():
    stored_key = load_api_key() or ""

    with gr.Blocks(title=APP_TITLE) as demo:
        gr.Markdown(f"# {APP_TITLE}\nPrepare a 履歴書 or Bio-Data for ENGINEER, SSW and TITP applications.")
        state = gr.State(None)
        with gr.Row():
            with gr.Column():
                tier = gr.Dropdown(label="Visa tier", choices=[t.value for t in VisaTier], value="ENGINEER")
                provider = gr.Dropdown(label="Provider", choices=["OpenAI", HF_PROVIDER_LABEL], value="OpenAI")
                api = gr.Textbox(label="OpenAI API Key", type="password", value=stored_key)
                save_key = gr.Checkbox(label="Save key locally (keyring preferred)", value=bool(stored_key))
                model = gr.Dropdown(
                    label="Model name", choices=OPENAI_MODELS, value=OPENAI_MODELS[0], allow_custom_value=True
                )
                clear_btn = gr.Button("Clear stored key")
                sample_btn = gr.Button("Load sample record")
            with gr.Column():
                record_box = gr.Code(label="Applicant record (JSON)", language="json", value=_record_text(ApplicantRecord()))
                apply_btn = gr.Button("Apply record")

        with gr.Row():
            with gr.Column():
                gaps_box = gr.Textbox(label="Completeness", lines=10, interactive=False)
                check_btn = gr.Button("Check completeness")
                ai_box = gr.Textbox(label="AI gap analysis (advisory)", lines=8, interactive=False)
                ai_btn = gr.Button("Ask AI to review")
            with gr.Column():
                cv_file = gr.File(label="Upload existing CV (PDF)", file_types=[".pdf"], type="binary")
                cv_status = gr.Textbox(label="CV import", lines=3, interactive=False)
                name_in = gr.Textbox(label="Name to transliterate")
                lang_in = gr.Textbox(label="Source language", value="English")
                translit_btn = gr.Button("Convert to Katakana")
                translit_out = gr.Textbox(label="Katakana", lines=3, interactive=False)

        chatbot = gr.Chatbot(label="Assistant", type="messages")
        chat_in = gr.Textbox(label="Ask the assistant")

        export_btn = gr.Button("Export document")
        export_status = gr.Textbox(label="Export", lines=6, interactive=False)
        tex_download = gr.File(label="Export .tex")
        pdf_download = gr.File(label="Export PDF (requires latexmk)")

        creds = [api, provider, model, save_key]
        apply_btn.click(apply_record_json, [state, record_box], [state, record_box, gaps_box])
        sample_btn.click(load_sample, [state, tier], [state, record_box, gaps_box])
        tier.change(change_tier, [state, tier], [state, record_box, gaps_box])
        check_btn.click(check_completeness, [state], gaps_box)
        ai_btn.click(run_ai_analysis, [state] + creds, ai_box)
        cv_file.upload(upload_cv, [state, cv_file] + creds, [state, record_box, cv_status])
        translit_btn.click(
            transliterate, [state, name_in, lang_in] + creds, [state, record_box, translit_out]
        )
        chat_in.submit(chat, [chat_in, chatbot, state] + creds, chatbot)
        export_btn.click(export, [state], [tex_download, pdf_download, export_status])

        def _update_provider_fields(selected: str):
            choices, value, key_label = _provider_defaults(selected)
            return gr.update(choices=choices, value=value), gr.update(label=key_label)

        provider.change(fn=_update_provider_fields, inputs=provider, outputs=[model, api])
        clear_btn.click(fn=clear_api_key, inputs=None, outputs=api)

    return demo


if __name__ == "__main__":
    app = build_ui()
    app.launch(
        server_name="0.0.0.0",
        server_port=int(os.getenv("PORT", "7860")),
    )
