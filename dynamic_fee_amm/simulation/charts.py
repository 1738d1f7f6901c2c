"""Plotly charts for simulation results."""

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from dynamic_fee_amm.simulation.runner import BatchResult, SimulationResult


def create_price_chart(result: SimulationResult) -> go.Figure:
    """Fair price against the pool's spot price."""
    df = result.to_frame()

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=df.index, y=df['fair_price'], mode='lines', name='Fair price',
        line=dict(color='#FF9800'),
    ))
    fig.add_trace(go.Scatter(
        x=df.index, y=df['spot_price'], mode='lines', name='Pool price',
        line=dict(color='#4CAF50'),
    ))
    fig.update_layout(
        title=f'Price (seed {result.seed})',
        xaxis_title='Time',
        yaxis_title='B per A',
        hovermode='x unified',
        template='plotly_white',
        height=400,
    )
    return fig


def create_fee_chart(result: SimulationResult) -> go.Figure:
    """Fee in basis points with the volatility accumulator on a second axis."""
    df = result.to_frame()

    fig = make_subplots(specs=[[{"secondary_y": True}]])
    fig.add_trace(
        go.Scatter(x=df.index, y=df['fee'] * 10_000, mode='lines', name='Fee (bps)',
                   line=dict(color='#2196F3')),
        secondary_y=False,
    )
    fig.add_trace(
        go.Scatter(x=df.index, y=df['volatility_accumulator'], mode='lines',
                   name='Volatility accumulator', line=dict(color='#9E9E9E', dash='dot')),
        secondary_y=True,
    )
    fig.update_layout(
        title=f'Dynamic fee (seed {result.seed})',
        xaxis_title='Time',
        hovermode='x unified',
        template='plotly_white',
        height=400,
    )
    fig.update_yaxes(title_text='Fee (bps)', secondary_y=False)
    fig.update_yaxes(title_text='Accumulator', secondary_y=True)
    return fig


def create_fee_distribution_chart(batch: BatchResult) -> go.Figure:
    """Histogram of average fee per simulation."""
    fig = go.Figure()
    fig.add_trace(go.Histogram(
        x=[r.average_fee * 10_000 for r in batch.results],
        marker_color='#2196F3',
        opacity=0.8,
        nbinsx=20,
    ))
    fig.update_layout(
        title='Average fee across simulations',
        xaxis_title='Average fee (bps)',
        yaxis_title='Count',
        template='plotly_white',
        height=400,
    )
    return fig


def write_report(batch: BatchResult, path: str) -> None:
    """Write the first simulation's charts and the batch distribution to HTML."""
    figures = []
    if batch.results:
        first = batch.results[0]
        figures.extend([create_price_chart(first), create_fee_chart(first)])
    figures.append(create_fee_distribution_chart(batch))

    with open(path, "w", encoding="utf-8") as f:
        for i, fig in enumerate(figures):
            f.write(fig.to_html(full_html=False, include_plotlyjs="cdn" if i == 0 else False))
