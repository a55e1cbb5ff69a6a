import os
import re
from urllib.parse import unquote

import requests
import streamlit as st

API_BASE = os.getenv("WORD2PDF_API_BASE", os.getenv("API_BASE", "http://localhost:8080")).rstrip("/")
REQUEST_TIMEOUT = float(os.getenv("WORD2PDF_UI_TIMEOUT", "300"))

UPLOAD_TYPES = ["doc", "docx", "xls", "xlsx", "ppt", "pptx"]


def _reset_state():
    for key in ["pdf_bytes", "pdf_name", "error"]:
        if key in st.session_state:
            del st.session_state[key]
    # Bump the uploader key to clear any previously uploaded file widget state
    if "upload_key" in st.session_state:
        st.session_state["upload_key"] += 1
    else:
        st.session_state["upload_key"] = 1


def _download_name(headers: dict[str, str], fallback: str) -> str:
    disposition = headers.get("Content-Disposition", "")
    m = re.search(r"filename\*=utf-8''([^;]+)", disposition, re.IGNORECASE)
    if m:
        return unquote(m.group(1))
    m = re.search(r'filename="?([^";]+)"?', disposition)
    if m:
        return m.group(1)
    return fallback


def _error_message(resp: requests.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return f"Conversion failed: {resp.status_code} {resp.text}"
    msg = f"Conversion failed: {resp.status_code} {data.get('error', 'unknown error')}"
    if data.get("details"):
        msg += f"\n\n{data['details']}"
    return msg


def _convert(name: str, data: bytes, content_type: str | None) -> tuple[bytes, str] | str:
    """Upload a document to the API; returns (pdf bytes, filename) or an error message."""
    files = {"file": (name, data, content_type or "application/octet-stream")}
    try:
        resp = requests.post(f"{API_BASE}/convert", files=files, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        return f"Failed to connect to API: {e}"
    if resp.status_code != 200:
        return _error_message(resp)
    stem = name.rsplit(".", 1)[0]
    return resp.content, _download_name(resp.headers, f"{stem}.pdf")


def main() -> None:
    st.set_page_config(page_title="Word2PDF", page_icon="📄", layout="centered")
    st.title("📄 Word2PDF")
    st.caption(f"API base: {API_BASE}")

    if st.button("Restart", type="secondary"):
        _reset_state()
        st.rerun()

    if "upload_key" not in st.session_state:
        st.session_state["upload_key"] = 0
    uploaded = st.file_uploader(
        "Upload a Word, Excel or PowerPoint document",
        type=UPLOAD_TYPES,
        key=f"uploader-{st.session_state['upload_key']}"
    )

    if uploaded and "pdf_bytes" not in st.session_state and st.button("Convert to PDF", type="primary"):
        with st.spinner("Converting..."):
            outcome = _convert(uploaded.name, uploaded.getvalue(), uploaded.type)
        if isinstance(outcome, str):
            st.session_state["error"] = outcome
        else:
            st.session_state.pop("error", None)
            st.session_state["pdf_bytes"], st.session_state["pdf_name"] = outcome
            st.toast("Conversion complete", icon="✅")

    if "pdf_bytes" in st.session_state:
        st.success("Conversion complete!")
        st.download_button(
            label="Download PDF",
            data=st.session_state["pdf_bytes"],
            file_name=st.session_state["pdf_name"],
            mime="application/pdf",
        )

    if err := st.session_state.get("error"):
        st.error(err)


if __name__ == "__main__":
    main()
