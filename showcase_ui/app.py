from __future__ import annotations
import streamlit as st
from showcase_ui.config import APP_TITLE, SHOWCASE_API_BASE, GALLERY_COLUMNS
from showcase_ui.api_client import submit_photo, fetch_leaderboard
from showcase_ui.ranking import rank_participants, decode_image

st.set_page_config(page_title=APP_TITLE, layout="wide")
st.title(APP_TITLE)

with st.sidebar:
    st.header("Settings")
    api_base = st.text_input("API base URL", value=SHOWCASE_API_BASE, placeholder="http://host:port")

st.subheader("Share your upcycling find")
with st.form("submission", clear_on_submit=False):
    email = st.text_input("Email")
    photo = st.file_uploader("Photo", type=["jpg", "jpeg", "png", "webp", "heic"])
    sent = st.form_submit_button("Submit", type="primary")

if sent:
    if not email or photo is None:
        st.warning("Email and image are required")
    else:
        with st.spinner("Asking Gemini..."):
            ok, payload = submit_photo(api_base, email, photo.name, photo.getvalue(), photo.type)
        if ok:
            st.success(payload.get("message", "Uploaded"))
            st.markdown(payload.get("geminiResponse", ""))
            st.caption(payload.get("geminiUri", ""))
        else:
            st.error(f"Upload failed: {payload}")

st.divider()
st.subheader("Leaderboard")
ok, entries = fetch_leaderboard(api_base)
if not ok:
    st.error(f"Could not load leaderboard: {entries}")
elif not entries:
    st.caption("No submissions yet. Be the first!")
else:
    st.dataframe(rank_participants(entries), hide_index=True, width="stretch")
    cols = st.columns(GALLERY_COLUMNS)
    for i, entry in enumerate(entries):
        data = decode_image(entry)
        if data is None:
            continue
        with cols[i % GALLERY_COLUMNS]:
            st.image(data, caption=entry.get("email"))
