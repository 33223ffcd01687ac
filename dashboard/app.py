"""Streamlit operator dashboard for the Event Allocator API."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import pandas as pd
import requests
import streamlit as st

from backend.utils.config import get_settings

# ==========================================
# Configuration & Constants
# ==========================================
# ALLOCATOR_API_URL points this at the running FastAPI server
settings = get_settings()
API_BASE_URL = settings.api_base_url
REQUEST_TIMEOUT_SECONDS = settings.request_timeout_seconds

st.set_page_config(
    page_title="Event Allocator",
    page_icon="🎪",
    layout="wide",
)

# ==========================================
# API Helper Functions
# ==========================================
def _error_message(response: requests.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(detail, dict):
        return str(detail.get("message", detail))
    return str(detail)


def fetch_snapshot() -> Optional[Dict[str, Any]]:
    """Pull the current allocations, reports and catalog in one call."""
    try:
        response = requests.get(f"{API_BASE_URL}/snapshot", timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        st.error(f"Backend connection failed: {e}")
        return None


def submit_allocation(
    event_name: str,
    event_capacity: str,
    venue_name: Optional[str],
) -> Tuple[bool, str]:
    try:
        response = requests.post(
            f"{API_BASE_URL}/allocate",
            json={
                "event_name": event_name,
                "event_capacity": event_capacity,
                "venue_name": venue_name,
            },
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
    except requests.exceptions.RequestException as e:
        return False, f"Backend connection failed: {e}"
    if response.ok:
        payload = response.json()
        return True, f"Allocated {payload['event_name']} to {payload['venue_name']}"
    return False, _error_message(response)


def submit_removal(event: Optional[Dict[str, Any]]) -> Tuple[bool, str]:
    if event is None:
        return False, "Select an event to remove"
    try:
        response = requests.post(
            f"{API_BASE_URL}/deallocate",
            json={"event_name": event["name"], "event_capacity": event["capacity"]},
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
    except requests.exceptions.RequestException as e:
        return False, f"Backend connection failed: {e}"
    if response.ok:
        return True, f"Removed {event['name']}"
    return False, _error_message(response)


# ==========================================
# UI Sections
# ==========================================
def render_add_section(snapshot: Dict[str, Any]) -> None:
    st.subheader("Add Allocation")
    free_venues = [venue for venue in snapshot["venues"] if not venue["allocated"]]
    with st.form("add_allocation", clear_on_submit=True):
        event_name = st.text_input("Event Name")
        event_capacity = st.text_input("Event Capacity")
        venue = st.selectbox(
            "Venues Available",
            free_venues,
            index=None,
            format_func=lambda item: f"{item['name']} ({item['capacity']})",
        )
        submitted = st.form_submit_button("Add Allocation", type="primary")

    if submitted:
        ok, message = submit_allocation(
            event_name,
            event_capacity,
            venue["name"] if venue else None,
        )
        if ok:
            st.success(message)
            st.rerun()
        else:
            st.error(message)


def render_remove_section(snapshot: Dict[str, Any]) -> None:
    st.subheader("Remove Allocation")
    with st.form("remove_allocation"):
        event = st.selectbox(
            "Allocated Events",
            snapshot["events"],
            index=None,
            format_func=lambda item: f"{item['name']} ({item['capacity']}) @ {item['venue_name']}",
        )
        submitted = st.form_submit_button("Remove Allocation")

    if submitted:
        ok, message = submit_removal(event)
        if ok:
            st.success(message)
            st.rerun()
        else:
            st.error(message)


def render_reports(snapshot: Dict[str, Any]) -> None:
    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Allocations")
        if snapshot["allocations"]:
            st.dataframe(pd.DataFrame({"allocation": snapshot["allocations"]}), use_container_width=True)
        else:
            st.info("No events allocated yet.")
    with col2:
        st.subheader("Corridor Traffic")
        if snapshot["corridors"]:
            st.dataframe(pd.DataFrame({"corridor": snapshot["corridors"]}), use_container_width=True)
        else:
            st.info("No traffic on any corridor.")


# ==========================================
# Main App
# ==========================================
def main() -> None:
    st.title("Event Allocator")
    st.sidebar.caption(f"API: {API_BASE_URL}")

    snapshot = fetch_snapshot()
    if snapshot is None:
        return
    if not snapshot["invariant_holds"]:
        st.sidebar.error("Engine invariant check failed")

    left, right = st.columns(2)
    with left:
        render_add_section(snapshot)
    with right:
        render_remove_section(snapshot)

    st.markdown("---")
    render_reports(snapshot)


if __name__ == "__main__":
    main()
