"""
Shifty Streamlit UI - Live rotation status
Reads state.json and config.json; never writes state.json.
"""
import streamlit as st
from datetime import datetime, timezone
from pathlib import Path
import pandas as pd
import sys

# Only add the repo root in development mode
if not getattr(sys, 'frozen', False):
    sys.path.insert(0, str(Path(__file__).parent.parent))

from shifty import ConfigManager, EventLogger, ShiftySettings, StateStore, find_option, make_option
from streamlit_autorefresh import st_autorefresh

# Page config
st.set_page_config(page_title="Shifty", page_icon="🔁", layout="wide")

# Auto-refresh every 30 seconds (same cadence as the runner tick)
st_autorefresh(interval=30000, key="datarefresh")

# Initialize session state
if 'settings' not in st.session_state:
    st.session_state.settings = ShiftySettings.from_env()
settings = st.session_state.settings

if 'config_manager' not in st.session_state:
    st.session_state.config_manager = ConfigManager(str(settings.config_path))
if 'state_store' not in st.session_state:
    st.session_state.state_store = StateStore(str(settings.storage_dir))
if 'event_logger' not in st.session_state:
    st.session_state.event_logger = EventLogger(str(settings.event_log_path))

config_manager = st.session_state.config_manager
config = config_manager.load_config()
options = config.sanitized_options()
interval = config.interval_range()
state = st.session_state.state_store.load()

st.title("🔁 Shifty")
st.caption(f"Storage: {settings.storage_dir}")

# Status Section
st.header("📍 Current Posture")

if state is None:
    st.info("No rotation yet. Start one in a terminal:  python shifty_runner.py run")
else:
    current = find_option(options, state.current_label)
    icon = current.icon if current else "❔"
    now = datetime.now(timezone.utc)
    remaining_min = max(0.0, (state.next_change_at - now).total_seconds() / 60.0)

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Current", f"{icon} {state.current_label}")
    with col2:
        st.metric("Next change", state.next_change_at.astimezone().strftime("%I:%M %p"))
    with col3:
        st.metric("Remaining", f"{remaining_min:.0f} min")

    if remaining_min == 0.0:
        st.warning("Change is due; the runner switches on its next tick.")

    st.subheader("Up Next")
    upcoming = []
    for position, label in enumerate(state.queue_labels, start=1):
        option = find_option(options, label)
        upcoming.append({
            "#": position,
            "Icon": option.icon if option else "",
            "Label": label
        })
    if upcoming:
        st.dataframe(pd.DataFrame(upcoming), hide_index=True, use_container_width=True)
    else:
        st.caption("Queue is empty; it is reshuffled on the next switch.")

# Options Section
st.header("🧩 Options")
st.caption(f"Interval: {interval.min_minutes}-{interval.max_minutes} minutes")
st.dataframe(
    pd.DataFrame([option.to_dict() for option in options])[["icon", "label"]],
    hide_index=True,
    use_container_width=True
)

with st.form("add_option", clear_on_submit=True):
    st.subheader("Add Option")
    col1, col2 = st.columns(2)
    with col1:
        raw_label = st.text_input("Label", placeholder="WALK")
    with col2:
        raw_icon = st.text_input("Icon (optional)", placeholder="🚶")
    submitted = st.form_submit_button("Add")

if submitted:
    option = make_option(raw_label, raw_icon)
    if not option.label:
        st.error("Label is empty.")
    elif find_option(options, option.label) is not None:
        st.error(f"{option.label} already exists.")
    else:
        # The runner merges it into the live queue on its next tick
        config.options = list(options) + [option]
        if config_manager.save_config(config):
            st.success(f"Added {option.display_title}")
            st.rerun()
        else:
            st.error("Could not write config.json")

# Events Section
st.header("📜 Recent Events")
events = st.session_state.event_logger.get_recent_events(limit=50)
if events:
    df = pd.DataFrame(events)
    df["time"] = pd.to_datetime(df["timestamp"]).dt.strftime("%Y-%m-%d %H:%M:%S")
    df = df[["time", "event_type", "label", "reason"]].iloc[::-1]
    st.dataframe(df, hide_index=True, use_container_width=True)
else:
    st.caption("No events logged yet.")
