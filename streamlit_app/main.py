"""
Carbon Credit Monitor - Streamlit Dashboard
Emission monitoring, carbon credits and threshold alerts
"""

import streamlit as st
import requests
import pandas as pd
from datetime import datetime, timedelta
import plotly.graph_objects as go
import plotly.express as px

# Page configuration
st.set_page_config(
    page_title="Carbon Credit Monitor",
    page_icon="🌱",
    layout="wide",
    initial_sidebar_state="expanded"
)

SEVERITY_COLORS = {"medium": "#ffa15a", "high": "#ef553b", "critical": "#b00020", "low": "#636efa"}

# Sidebar configuration
st.sidebar.title("⚙️ Configuration")
api_url = st.sidebar.text_input("API Base URL", value="http://localhost:8000")
st.session_state.api_url = api_url.rstrip("/")

if "token" not in st.session_state:
    st.session_state.token = None
    st.session_state.user = None


# API helper functions
def make_request(method: str, endpoint: str, data=None, params=None):
    """Make an authenticated request to the API"""
    headers = {}
    if st.session_state.token:
        headers["Authorization"] = f"Bearer {st.session_state.token}"
    try:
        response = requests.request(
            method,
            f"{st.session_state.api_url}{endpoint}",
            json=data,
            params=params,
            headers=headers,
            timeout=10
        )
        if response.status_code in (401, 403):
            st.session_state.token = None
            st.warning("Session expired, please log in again")
            return None
        response.raise_for_status()
        return response.json() if response.text else {}
    except requests.exceptions.RequestException as e:
        detail = str(e)
        if getattr(e, "response", None) is not None:
            try:
                body = e.response.json()
                detail = body.get("error") or body.get("detail") or detail
            except ValueError:
                pass
        st.error(f"API Error: {detail}")
        return None


# Login
with st.sidebar:
    if st.session_state.token:
        user = st.session_state.user or {}
        st.success(f"Signed in as {user.get('name', '')} ({user.get('role', '')})")
        if st.button("Log out"):
            st.session_state.token = None
            st.session_state.user = None
            st.rerun()
    else:
        with st.form("login_form"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            if st.form_submit_button("Log in"):
                result = make_request("POST", "/auth/login", {"email": email, "password": password})
                if result:
                    st.session_state.token = result["token"]
                    st.session_state.user = result["user"]
                    st.rerun()

# Main title
st.title("🌱 Carbon Credit Monitor")
st.markdown("**Industrial emission monitoring with carbon credit derivation**")

if not st.session_state.token:
    st.info("Log in from the sidebar to see your sites.")
    st.stop()

tab1, tab2, tab3, tab4 = st.tabs(["📊 Dashboard", "🚨 Alerts", "🌱 Credits", "📡 Sensors"])

# ============ DASHBOARD TAB ============
with tab1:
    st.header("Dashboard Overview")

    stats = make_request("GET", "/dashboard/stats")
    if stats:
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            st.metric("🏭 Current CO2", f"{stats.get('current_emission', 0)} kg/h")
        with col2:
            st.metric("🌱 Total Credits", f"{stats.get('total_credits', 0):.3f} t")
        with col3:
            st.metric("📡 Active Sensors", stats.get("active_sensors", 0))
        with col4:
            st.metric("🚨 Unread Alerts", stats.get("unread_alerts", 0))

    st.divider()

    readings = make_request("GET", "/emissions/recent")
    if readings:
        df = pd.DataFrame(readings)
        df["timestamp"] = pd.to_datetime(df["timestamp"])
        df = df.sort_values("timestamp")

        st.subheader("CO2 Emissions (latest 50 readings)")
        fig = px.line(df, x="timestamp", y="co2_value", color="sensor_id", markers=True)
        threshold = st.number_input("Threshold line (kg/h)", value=1000.0, step=50.0)
        fig.add_hline(y=threshold, line_dash="dash", line_color="red", annotation_text="Threshold")
        fig.update_layout(height=400)
        st.plotly_chart(fig, width="stretch")

        st.dataframe(
            df.sort_values("timestamp", ascending=False)[
                ["timestamp", "sensor_id", "location", "co2_value", "pm25_value", "temperature", "humidity", "alert_id"]
            ],
            width="stretch",
            hide_index=True
        )
    else:
        st.info("No readings yet")

# ============ ALERTS TAB ============
with tab2:
    st.header("Alerts")

    unread_only = st.checkbox("Unread only", value=False)
    alerts = make_request("GET", "/alerts", params={"unread_only": str(unread_only).lower()})

    if alerts:
        severity_counts = pd.Series([a.get("severity") for a in alerts]).value_counts()
        fig = go.Figure(data=[go.Pie(
            labels=list(severity_counts.index),
            values=list(severity_counts.values),
            marker=dict(colors=[SEVERITY_COLORS.get(s, "#999999") for s in severity_counts.index])
        )])
        fig.update_layout(height=300)
        st.plotly_chart(fig, width="stretch")

        for alert in alerts:
            col1, col2 = st.columns([5, 1])
            with col1:
                badge = "🔵" if not alert.get("is_read") else "⚪"
                st.markdown(
                    f"{badge} **{alert.get('severity', '').upper()}** · "
                    f"{alert.get('created_at', '')[:19]} · {alert.get('alert_message', '')}"
                )
            with col2:
                if not alert.get("is_read") and st.button("Mark read", key=f"read_{alert['alert_id']}"):
                    if make_request("PATCH", f"/alerts/{alert['alert_id']}/read"):
                        st.rerun()
    else:
        st.success("No alerts")

# ============ CREDITS TAB ============
with tab3:
    st.header("Carbon Credits")

    monthly = make_request("GET", "/reports/credits/monthly")
    if monthly:
        df = pd.DataFrame(monthly).sort_values("month")
        fig = go.Figure()
        fig.add_bar(x=df["month"], y=df["credits_earned"], name="Earned", marker_color="#00cc96")
        fig.add_bar(x=df["month"], y=-df["credits_deficit"], name="Deficit", marker_color="#ff6b6b")
        fig.add_scatter(x=df["month"], y=df["net_credits"], name="Net", mode="lines+markers")
        fig.update_layout(barmode="relative", height=400)
        st.plotly_chart(fig, width="stretch")
        st.dataframe(df, width="stretch", hide_index=True)
    else:
        st.info("No credits calculated yet")

    st.divider()

    st.subheader("📅 Period Summary")
    col1, col2 = st.columns(2)
    with col1:
        start_date = st.date_input("From", value=datetime.now().date() - timedelta(days=30))
    with col2:
        end_date = st.date_input("To", value=datetime.now().date())
    summary = make_request(
        "GET",
        "/reports/summary",
        params={"start_date": str(start_date), "end_date": str(end_date)}
    )
    if summary:
        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("Total Emission", f"{summary.get('total_emission', 0):,.1f} kg")
        with col2:
            st.metric("Readings", summary.get("reading_count", 0))
        with col3:
            st.metric("Total Credits", f"{summary.get('total_credits', 0):.3f} t")

# ============ SENSORS TAB ============
with tab4:
    st.header("Sensors")

    sensors = make_request("GET", "/sensors")
    if sensors:
        st.dataframe(pd.DataFrame(sensors), width="stretch", hide_index=True)
    else:
        st.info("No sensors registered")

    st.subheader("➕ Register Sensor")
    with st.form("create_sensor_form", border=True):
        col1, col2, col3 = st.columns(3)
        with col1:
            sensor_id = st.text_input("Sensor ID", placeholder="SENSOR_005")
        with col2:
            model = st.text_input("Model", value="NDIR-CO2-500")
        with col3:
            location = st.text_input("Location", placeholder="Main Chimney")
        installation_date = st.date_input("Installation date", value=datetime.now().date())

        if st.form_submit_button("✅ Register Sensor", width="stretch"):
            result = make_request("POST", "/sensors", {
                "sensor_id": sensor_id,
                "sensor_type": "CO2",
                "model": model or None,
                "location": location or None,
                "installation_date": str(installation_date)
            })
            if result:
                st.success(f"✅ Sensor {result.get('sensor_id')} registered")
                st.rerun()

# Footer
st.divider()
st.markdown(
    f"**Carbon Credit Monitor** | API: {st.session_state.api_url} | "
    f"Last updated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"
)
