"""Charts for simulation output."""

from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd
import plotly.graph_objects as go

from arpp_sim.analysis.metrics import PoolMetrics, SimulationAnalysis


def save_figure(fig: go.Figure, path: str | Path) -> Path:
    """Write a figure to a standalone HTML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(str(path), include_plotlyjs="cdn")
    return path


def metrics_frame(metrics_history: Sequence[PoolMetrics]) -> pd.DataFrame:
    """One row per iteration with the four accumulated metrics."""
    return pd.DataFrame([
        {
            'Iteration': i + 1,
            'Price Volatility': float(m.price_volatility),
            'Liquidity Depth': float(m.liquidity_depth),
            'Trading Volume': float(m.trading_volume),
            'Impermanent Loss': float(m.impermanent_loss),
        }
        for i, m in enumerate(metrics_history)
    ], columns=['Iteration', 'Price Volatility', 'Liquidity Depth',
                'Trading Volume', 'Impermanent Loss'])


def create_price_chart(
    prices: Sequence[Decimal],
    p_refs: Sequence[Decimal],
    alpha: Optional[Decimal] = None,
    beta: Optional[Decimal] = None,
    output: Optional[str | Path] = None,
) -> go.Figure:
    """Line chart of quoted price against the reference price."""
    title = 'Price History'
    if alpha is not None and beta is not None:
        title = f'Price History (alpha={alpha}, beta={beta})'

    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=list(range(len(prices))),
        y=[float(p) for p in prices],
        mode='lines',
        name='Price',
        line=dict(color='#4CAF50', width=1)
    ))

    fig.add_trace(go.Scatter(
        x=list(range(len(p_refs))),
        y=[float(p) for p in p_refs],
        mode='lines',
        name='Reference Price',
        line=dict(color='#FF9800', width=1, dash='dot')
    ))

    fig.update_layout(
        title=title,
        xaxis_title='Step',
        yaxis_title='Price',
        hovermode='x unified',
        template='plotly_white',
        height=400
    )

    if output is not None:
        save_figure(fig, output)
    return fig


def create_metrics_chart(
    metrics_history: Sequence[PoolMetrics],
    output: Optional[str | Path] = None,
) -> go.Figure:
    """Per-iteration metrics, one line per accumulator."""
    df = metrics_frame(metrics_history)
    colors = ['#4CAF50', '#2196F3', '#FF9800', '#F44336']

    fig = go.Figure()
    for column, color in zip(df.columns[1:], colors):
        fig.add_trace(go.Scatter(
            x=df['Iteration'],
            y=df[column],
            mode='lines+markers',
            name=column,
            line=dict(color=color, width=2)
        ))

    fig.update_layout(
        title='Pool Metrics by Iteration',
        xaxis_title='Iteration',
        yaxis_title='Value',
        template='plotly_white',
        height=400
    )

    if output is not None:
        save_figure(fig, output)
    return fig


def create_simulation_analysis_chart(
    analysis: SimulationAnalysis,
    alpha: Optional[Decimal] = None,
    beta: Optional[Decimal] = None,
    output: Optional[str | Path] = None,
) -> go.Figure:
    """Bar chart of the three analysis scores."""
    labels = ['Price Stability', 'Avg Price Impact', 'Liquidity Efficiency']
    values = [
        float(analysis.price_stability),
        float(analysis.average_price_impact),
        float(analysis.liquidity_efficiency),
    ]

    title = 'Simulation Analysis'
    if alpha is not None and beta is not None:
        title = f'Simulation Analysis (alpha={alpha}, beta={beta})'

    fig = go.Figure(go.Bar(
        x=labels,
        y=values,
        marker_color=['#4CAF50', '#FF9800', '#2196F3'],
        text=[f'{v:.4f}' for v in values],
        textposition='auto'
    ))

    fig.update_layout(
        title=title,
        yaxis_title='Score',
        template='plotly_white',
        height=400
    )

    if output is not None:
        save_figure(fig, output)
    return fig


def visualize_random_walk(
    prices: Sequence[Decimal],
    output: Optional[str | Path] = None,
) -> go.Figure:
    """Single reference-price walk."""
    return visualize_random_walks([prices], output=output, title='Random Walk')


def visualize_random_walks(
    sequences: List[Sequence[Decimal]],
    output: Optional[str | Path] = None,
    title: str = 'Random Walks',
) -> go.Figure:
    """Overlay several reference-price walks."""
    fig = go.Figure()

    for i, prices in enumerate(sequences):
        fig.add_trace(go.Scatter(
            x=list(range(len(prices))),
            y=[float(p) for p in prices],
            mode='lines',
            name=f'Walk {i + 1}',
            line=dict(width=1)
        ))

    fig.update_layout(
        title=title,
        xaxis_title='Step',
        yaxis_title='Price',
        template='plotly_white',
        showlegend=len(sequences) <= 10,
        height=400
    )

    if output is not None:
        save_figure(fig, output)
    return fig
