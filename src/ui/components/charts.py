"""Chart components for visualization."""

from __future__ import annotations

from collections.abc import Sequence

import plotly.graph_objects as go
import streamlit as st

from src.application.services.presentation import ChartSlice


def build_pie_figure(slices: Sequence[ChartSlice], title: str = "") -> go.Figure:
    """Pie chart with the slice colours kept as given."""
    fig = go.Figure(
        go.Pie(
            labels=[s.name for s in slices],
            values=[s.value for s in slices],
            marker=dict(colors=[s.color for s in slices]),
            sort=False,
            hole=0.35,
            textinfo="percent",
            hovertemplate="%{label}<br>%{value:,.0f}<extra></extra>",
        )
    )
    fig.update_layout(
        title=title,
        margin=dict(t=40, b=10, l=10, r=10),
        legend=dict(orientation="h", yanchor="top", y=-0.05, xanchor="center", x=0.5),
        separators=", ",
    )
    return fig


def render_pie_chart(slices: Sequence[ChartSlice], title: str, key: str) -> None:
    """Render a pie chart, or a notice when every value is zero.

    Args:
        slices: Positive slices from the presentation adapter
        title: Chart title
        key: Unique key for the chart element
    """
    if not slices:
        st.info("Aucune donnée à représenter.")
        return
    st.plotly_chart(build_pie_figure(slices, title), use_container_width=True, key=key)
