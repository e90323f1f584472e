import logging
import os
from typing import List, Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from state_reference import add_state_reference, get_color_for_region

logger = logging.getLogger(__name__)

CHOROPLETH_FILENAME = 'unemployment_choropleth.html'
LINE_CHART_FILENAME = 'unemployment_line_chart.html'
BAR_RACE_FILENAME = 'unemployment_bar_race.html'

METRIC_LABELS = {
    'Unemployment_rate': 'Unemployment Rate (%)',
    'Labor_Force_Participation_Ratio': 'Labor Force Participation (%)',
    'Employment_Participation_Ratio': 'Employment Participation (%)',
    'Labor_Force': 'Labor Force',
    'Employment': 'Employment',
    'Unemployment': 'Unemployed Persons',
}


def _require_columns(df: pd.DataFrame, columns, chart_name: str):
    if df.empty:
        raise ValueError(f"{chart_name}: no annual records to plot")
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ValueError(f"{chart_name}: annual table is missing columns: {missing}")


def _with_reference(df: pd.DataFrame) -> pd.DataFrame:
    if 'State_Code' in df.columns and 'Region' in df.columns:
        return df.copy()
    return add_state_reference(df)


def create_choropleth_animation(annual: pd.DataFrame, metric: str = 'Unemployment_rate') -> go.Figure:
    """
    Animated USA choropleth of `metric`, one frame per year.

    The colour range is fixed across frames so years compare directly.
    State codes are drawn at each state's centroid from Latitude/Longitude.
    """
    _require_columns(annual, ['State', 'Year', metric, 'Latitude', 'Longitude'], 'Choropleth')

    plot_data = _with_reference(annual)
    plot_data = plot_data.dropna(subset=['State_Code']).sort_values(['Year', 'State'])
    if plot_data.empty:
        raise ValueError("Choropleth: no rows with a recognised state name")

    label = METRIC_LABELS.get(metric, metric)
    range_color = (plot_data[metric].min(), plot_data[metric].max())

    fig = px.choropleth(
        plot_data,
        locations='State_Code',
        locationmode='USA-states',
        color=metric,
        animation_frame='Year',
        scope='usa',
        color_continuous_scale='Reds',
        range_color=range_color,
        hover_name='State',
        hover_data={'State_Code': False, metric: ':.2f'},
        labels={metric: label},
    )

    centroids = plot_data.drop_duplicates('State')
    fig.add_trace(go.Scattergeo(
        lon=centroids['Longitude'],
        lat=centroids['Latitude'],
        text=centroids['State_Code'],
        mode='text',
        textfont=dict(size=9, color='#262730'),
        hoverinfo='skip',
        showlegend=False,
    ))

    fig.update_layout(
        title=f'{label} by State and Year',
        template='plotly_white',
        height=600,
        margin=dict(l=10, r=10, t=60, b=10),
        coloraxis_colorbar=dict(title=label),
        geo=dict(bgcolor='rgba(0,0,0,0)'),
    )
    return fig


def create_line_chart(annual: pd.DataFrame, states: Optional[List[str]] = None,
                      metric: str = 'Unemployment_rate',
                      national: Optional[pd.DataFrame] = None) -> go.Figure:
    """Create line chart of `metric` per state over the years"""
    _require_columns(annual, ['State', 'Year', metric], 'Line chart')

    plot_data = _with_reference(annual)
    if states:
        plot_data = plot_data[plot_data['State'].isin(states)]
        if plot_data.empty:
            raise ValueError(f"Line chart: none of the selected states are in the data: {states}")

    label = METRIC_LABELS.get(metric, metric)
    fig = go.Figure()

    for state in sorted(plot_data['State'].unique()):
        state_data = plot_data[plot_data['State'] == state].sort_values('Year')
        color = get_color_for_region(state_data['Region'].iloc[0])

        fig.add_trace(go.Scatter(
            x=state_data['Year'],
            y=state_data[metric],
            mode='lines',
            name=state,
            line=dict(color=color, width=1.5),
            opacity=0.7,
            hovertemplate=f'<b>{state}</b><br>Year: %{{x}}<br>{label}: %{{y:,.2f}}<extra></extra>',
            showlegend=False
        ))

        # Add state annotation at the end of each line
        last_row = state_data.iloc[-1]
        fig.add_annotation(
            x=last_row['Year'],
            y=last_row[metric],
            text=last_row['State_Code'] if pd.notna(last_row['State_Code']) else state,
            showarrow=False,
            xshift=14,
            font=dict(color=color, size=9),
        )

    if national is not None and not national.empty and metric == 'Unemployment_rate':
        fig.add_trace(go.Scatter(
            x=national['Year'],
            y=national['National_Unemployment_rate'],
            mode='lines',
            name='United States',
            line=dict(color='black', width=3, dash='dash'),
            hovertemplate='<b>United States</b><br>Year: %{x}<br>Rate: %{y:,.2f}%<extra></extra>',
        ))

    fig.update_layout(
        title=f'{label} per Year',
        xaxis_title='Year',
        yaxis_title=label,
        hovermode='closest',
        template='plotly_white',
        height=550,
        margin=dict(l=50, r=50, t=50, b=50)
    )
    return fig


def create_bar_chart_race(annual: pd.DataFrame, top_n: int = 10,
                          metric: str = 'Unemployment_rate', frame_duration: int = 800) -> go.Figure:
    """
    Animated ranked bar chart: the `top_n` states by `metric`, one frame per year.
    """
    _require_columns(annual, ['State', 'Year', metric], 'Bar chart race')
    if top_n < 1:
        raise ValueError("Bar chart race: top_n must be at least 1")

    plot_data = _with_reference(annual).dropna(subset=[metric])
    if plot_data.empty:
        raise ValueError(f"Bar chart race: no values for {metric}")
    label = METRIC_LABELS.get(metric, metric)
    years = sorted(plot_data['Year'].unique())
    x_max = plot_data[metric].max() * 1.1

    def year_bars(year):
        ranked = (plot_data[plot_data['Year'] == year]
                  .sort_values([metric, 'State'], ascending=[False, True])
                  .head(top_n)
                  .iloc[::-1])  # largest bar on top
        return go.Bar(
            x=ranked[metric],
            y=ranked['State'],
            orientation='h',
            marker=dict(color=[get_color_for_region(r) for r in ranked['Region']]),
            text=ranked[metric].map(lambda v: f'{v:,.1f}'),
            textposition='outside',
            hovertemplate=f'<b>%{{y}}</b><br>{label}: %{{x:,.2f}}<extra></extra>',
        )

    frames = [go.Frame(data=[year_bars(year)], name=str(year),
                       layout=go.Layout(title_text=f'Top {top_n} States by {label}: {year}'))
              for year in years]

    fig = go.Figure(data=frames[0].data, frames=frames)

    slider_steps = [
        dict(method='animate', label=str(year),
             args=[[str(year)], dict(mode='immediate', frame=dict(duration=frame_duration, redraw=True),
                                     transition=dict(duration=frame_duration // 2))])
        for year in years
    ]

    fig.update_layout(
        title=f'Top {top_n} States by {label}: {years[0]}',
        xaxis=dict(range=[0, x_max], title=label),
        yaxis=dict(title=None),
        template='plotly_white',
        height=550,
        margin=dict(l=130, r=50, t=60, b=50),
        updatemenus=[dict(
            type='buttons',
            showactive=False,
            x=0.0, y=-0.15, xanchor='left',
            buttons=[
                dict(label='Play', method='animate',
                     args=[None, dict(frame=dict(duration=frame_duration, redraw=True),
                                      transition=dict(duration=frame_duration // 2, easing='cubic-in-out'),
                                      fromcurrent=True)]),
                dict(label='Pause', method='animate',
                     args=[[None], dict(frame=dict(duration=0, redraw=False), mode='immediate')]),
            ],
        )],
        sliders=[dict(active=0, steps=slider_steps, x=0.15, len=0.85, y=-0.1,
                      currentvalue=dict(prefix='Year: '))],
    )
    return fig


def render_report(annual: pd.DataFrame, output_dir: str = '.',
                  national: Optional[pd.DataFrame] = None) -> List[str]:
    """Write the choropleth, line chart and bar chart race as HTML files."""
    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir, exist_ok=True)

    figures = [
        (CHOROPLETH_FILENAME, create_choropleth_animation(annual)),
        (LINE_CHART_FILENAME, create_line_chart(annual, national=national)),
        (BAR_RACE_FILENAME, create_bar_chart_race(annual)),
    ]

    paths = []
    for filename, fig in figures:
        path = os.path.join(output_dir, filename)
        fig.write_html(path, include_plotlyjs='cdn')
        logger.info(f"Saved {path}")
        paths.append(path)
    return paths
