"""
Section pages.

Each page asks the context to render its section, which builds any chart
not yet built, and lays the returned figures out with Streamlit.
"""
import pandas as pd
import streamlit as st

from sast.connector import SYNTHETIC
from sast.context import AppContext, bots_frame, filter_explorer
from sast.sections import SectionId
from sast.synthetic.generators import EXPLORER_DEVICES, EXPLORER_PROTOCOLS, EXPLORER_REGIONS

SECTION_TITLES = {
    SectionId.OVERVIEW: "Overview",
    SectionId.TRAFFIC: "Traffic",
    SectionId.SECURITY: "Security",
    SectionId.CONNECTIVITY: "Connectivity",
    SectionId.BOTS: "Bots & Crawlers",
    SectionId.TOOLS: "Tools",
    SectionId.ANOMALY: "Sentinel Shield",
}


def _chart(charts, chart_id: str, title: str = None):
    if title:
        st.markdown(f"**{title}**")
    fig = charts.get(chart_id)
    if fig is None:
        st.info("Chart unavailable.")
        return
    st.plotly_chart(fig, use_container_width=True, key=chart_id)


def _source_badge(ctx: AppContext, section: SectionId):
    if ctx.loader.sources.get(section) == SYNTHETIC:
        st.caption("Live data unavailable - showing generated sample data.")


def render_overview(ctx: AppContext):
    p = ctx.payload(SectionId.OVERVIEW)
    charts = ctx.render_section(SectionId.OVERVIEW)
    m = p.metrics

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total Requests", f"{m.total_requests:,}")
    c2.metric("Peak RPS", f"{m.peak_rps:,}")
    c3.metric("Avg RPS", f"{m.avg_rps:,.1f}")
    c4.metric("Success Rate", f"{m.success_rate}%", f"{m.failures:,} failures", delta_color="off")

    col1, col2 = st.columns([2, 1])
    with col1:
        _chart(charts, "overview.rps", "Requests per second (24h)")
    with col2:
        _chart(charts, "overview.methods", "HTTP methods")


def render_traffic(ctx: AppContext):
    charts = ctx.render_section(SectionId.TRAFFIC)
    _chart(charts, "traffic.volume", "Request volume (7 days)")

    col1, col2 = st.columns(2)
    with col1:
        _chart(charts, "traffic.devices", "Devices")
        _chart(charts, "traffic.protocols", "Protocols")
    with col2:
        _chart(charts, "traffic.browsers", "Browsers")
        _chart(charts, "traffic.mobile_os", "Mobile OS")


def render_security(ctx: AppContext):
    p = ctx.payload(SectionId.SECURITY)
    charts = ctx.render_section(SectionId.SECURITY)

    for key, layer, title in (
        ("app", p.app_layer, "Application layer"),
        ("net", p.net_layer, "Network layer"),
    ):
        st.subheader(title)
        st.metric("Attacks (24h)", f"{layer.total_24h:,}", f"{layer.change_pct:+.1f}%", delta_color="inverse")
        col1, col2 = st.columns([2, 1])
        with col1:
            _chart(charts, f"security.{key}_line")
        with col2:
            _chart(charts, f"security.{key}_types")


def render_connectivity(ctx: AppContext):
    p = ctx.payload(SectionId.CONNECTIVITY)
    charts = ctx.render_section(SectionId.CONNECTIVITY)
    cur = p.current

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("IQI", cur.iqi)
    c2.metric("Download", f"{cur.download} Mbps")
    c3.metric("Upload", f"{cur.upload} Mbps")
    c4.metric("Latency", f"{cur.latency:g} ms")

    _chart(charts, "connectivity.speed", "Bandwidth")
    col1, col2 = st.columns(2)
    with col1:
        _chart(charts, "connectivity.iqi", "Internet quality index")
    with col2:
        _chart(charts, "connectivity.latency", "Latency")


def render_bots(ctx: AppContext):
    p = ctx.payload(SectionId.BOTS)
    df = bots_frame(p.bots)

    if df.empty:
        st.info("No crawler activity recorded.")
    else:
        st.dataframe(
            df,
            use_container_width=True,
            hide_index=True,
            column_config={
                "requests": st.column_config.ProgressColumn(
                    "Requests", format="%d", min_value=0, max_value=int(df["requests"].max())
                ),
            },
        )

    if p.robots_txt_agents:
        st.markdown("**robots.txt rules for AI crawlers**")
        st.code("\n\n".join(f"User-agent: {a}\nDisallow: /" for a in p.robots_txt_agents), language="text")


def render_tools(ctx: AppContext):
    p = ctx.payload(SectionId.TOOLS)

    st.subheader("Data explorer")
    c1, c2, c3 = st.columns(3)
    protocol = c1.selectbox("Protocol", ["All"] + EXPLORER_PROTOCOLS)
    device = c2.selectbox("Device", ["All"] + EXPLORER_DEVICES)
    region = c3.selectbox("Region", ["All"] + EXPLORER_REGIONS)

    df = filter_explorer(
        p.explorer,
        protocol=None if protocol == "All" else protocol,
        device=None if device == "All" else device,
        region=None if region == "All" else region,
    )
    st.caption(f"{len(df)} of {len(p.explorer)} requests")
    st.dataframe(df, use_container_width=True, hide_index=True)

    st.subheader("Reports")
    st.dataframe(pd.DataFrame([r.model_dump() for r in p.reports]), use_container_width=True, hide_index=True)


def _confusion_frame(cm) -> pd.DataFrame:
    return pd.DataFrame(
        [[cm.tn, cm.fp], [cm.fn, cm.tp]],
        index=["Actual normal", "Actual attack"],
        columns=["Predicted normal", "Predicted attack"],
    )


def render_anomaly(ctx: AppContext):
    p = ctx.payload(SectionId.ANOMALY)
    charts = ctx.render_section(SectionId.ANOMALY)
    status = p.status

    if status.attack_detected:
        st.error(f"ATTACK DETECTED - Phase: {status.current_phase.capitalize()}")
    else:
        st.success(f"SYSTEM NORMAL - Phase: {status.current_phase.capitalize()}")

    metric_ids = [cid for cid in charts if cid.startswith("anomaly.")
                  and cid not in ("anomaly.feature_importance", "anomaly.detection_comparison")]
    for row in range(0, len(metric_ids), 2):
        cols = st.columns(2)
        for col, chart_id in zip(cols, metric_ids[row:row + 2]):
            with col:
                _chart(charts, chart_id, chart_id.split(".", 1)[1].replace("_", " ").title())

    col1, col2 = st.columns(2)
    with col1:
        _chart(charts, "anomaly.feature_importance", "Feature importance")
    with col2:
        _chart(charts, "anomaly.detection_comparison", "Detection comparison")

    analysis = p.analysis
    perf = analysis.detection_performance
    col1, col2 = st.columns(2)
    with col1:
        st.markdown("**Signal-processing confusion matrix**")
        st.table(_confusion_frame(analysis.sp_confusion_matrix))
    with col2:
        st.markdown("**Model confusion matrix**")
        st.table(_confusion_frame(analysis.ml_confusion_matrix))

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("SP Accuracy", f"{perf.sp_accuracy}%")
    c2.metric("ML Accuracy", f"{perf.ml_accuracy}%")
    c3.metric("Detection Latency", f"{perf.detection_latency_ms:g}ms")
    c4.metric("False Positive Rate", f"{perf.false_positive_rate}%")

    st.markdown("**Mitigation**")
    st.dataframe(
        pd.DataFrame([{"Action": a.action, "Status": a.status.upper(), "Detail": a.summary} for a in p.mitigation]),
        use_container_width=True,
        hide_index=True,
    )

    th = p.thresholds
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Entropy Threshold", th.entropy_threshold)
    c2.metric("Hurst Threshold", th.hurst_threshold)
    c3.metric("Anomaly Threshold", th.anomaly_threshold)
    c4.metric("ML Decision Boundary", th.ml_decision_boundary)


PAGES = {
    SectionId.OVERVIEW: render_overview,
    SectionId.TRAFFIC: render_traffic,
    SectionId.SECURITY: render_security,
    SectionId.CONNECTIVITY: render_connectivity,
    SectionId.BOTS: render_bots,
    SectionId.TOOLS: render_tools,
    SectionId.ANOMALY: render_anomaly,
}


def render_page(ctx: AppContext, section: SectionId):
    st.title(SECTION_TITLES[section])
    _source_badge(ctx, section)
    PAGES[section](ctx)
