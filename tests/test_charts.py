import os

import pandas as pd
import pytest

from state_unemployment_compiler import StateUnemploymentCompiler
from unemployment_charts import (
    create_bar_chart_race,
    create_choropleth_animation,
    create_line_chart,
    render_report,
)


def test_choropleth_has_one_frame_per_year(annual_df):
    fig = create_choropleth_animation(annual_df)

    assert [frame.name for frame in fig.frames] == ['2019', '2020', '2021']
    assert set(fig.frames[0].data[0].locations) == {'CA', 'TX', 'NY'}


def test_choropleth_color_range_is_fixed_across_years(annual_df):
    fig = create_choropleth_animation(annual_df)

    assert fig.layout.coloraxis.cmin == pytest.approx(3.5)
    assert fig.layout.coloraxis.cmax == pytest.approx(9.5)


def test_choropleth_labels_states_at_centroids(annual_df):
    fig = create_choropleth_animation(annual_df)
    labels = fig.data[-1]

    assert labels.mode == 'text'
    assert list(labels.text) == ['CA', 'NY', 'TX']
    assert list(labels.lat) == [36.78, 43.30, 31.97]


def test_choropleth_skips_unknown_states(annual_df):
    extra = annual_df.iloc[[0]].assign(State='Atlantis')
    fig = create_choropleth_animation(pd.concat([annual_df, extra], ignore_index=True))

    for frame in fig.frames:
        assert None not in list(frame.data[0].locations)
        assert len(frame.data[0].locations) == 3


def test_choropleth_other_metric(annual_df):
    fig = create_choropleth_animation(annual_df, metric='Unemployment')
    assert fig.layout.coloraxis.cmax == pytest.approx(95.0)


def test_choropleth_requires_columns(annual_df):
    with pytest.raises(ValueError, match='Latitude'):
        create_choropleth_animation(annual_df.drop(columns=['Latitude']))


def test_line_chart_one_trace_per_state(annual_df):
    fig = create_line_chart(annual_df)

    assert [trace.name for trace in fig.data] == ['California', 'New York', 'Texas']
    assert list(fig.data[0].x) == [2019, 2020, 2021]
    assert list(fig.data[0].y) == [4.1, 6.0, 9.5]
    assert [a.text for a in fig.layout.annotations] == ['CA', 'NY', 'TX']


def test_line_chart_colors_by_region(annual_df):
    fig = create_line_chart(annual_df)
    colors = {trace.name: trace.line.color for trace in fig.data}

    assert colors['California'] == '#FF8C00'
    assert colors['Texas'] == '#DC143C'
    assert colors['New York'] == '#1E90FF'


def test_line_chart_state_filter(annual_df):
    fig = create_line_chart(annual_df, states=['Texas'])
    assert [trace.name for trace in fig.data] == ['Texas']


def test_line_chart_unknown_selection_raises(annual_df):
    with pytest.raises(ValueError, match='selected states'):
        create_line_chart(annual_df, states=['Atlantis'])


def test_line_chart_adds_national_line(annual_df):
    national = StateUnemploymentCompiler().national_annual_summary(annual_df)
    fig = create_line_chart(annual_df, national=national)

    assert fig.data[-1].name == 'United States'
    assert fig.data[-1].line.dash == 'dash'
    assert len(fig.data) == 4


def test_bar_chart_race_frames_rank_states(annual_df):
    fig = create_bar_chart_race(annual_df, top_n=2)

    assert [frame.name for frame in fig.frames] == ['2019', '2020', '2021']
    bars_2020 = fig.frames[1].data[0]
    # largest value is drawn last so it sits on top
    assert list(bars_2020.y) == ['New York', 'Texas']
    assert list(bars_2020.x) == [7.5, 8.0]


def test_bar_chart_race_fixed_axis_and_controls(annual_df):
    fig = create_bar_chart_race(annual_df)

    assert fig.layout.xaxis.range[1] == pytest.approx(9.5 * 1.1)
    assert [button.label for button in fig.layout.updatemenus[0].buttons] == ['Play', 'Pause']
    assert [step.label for step in fig.layout.sliders[0].steps] == ['2019', '2020', '2021']


def test_bar_chart_race_ties_break_by_state_name(annual_df):
    tied = annual_df.copy()
    tied.loc[tied['Year'] == 2019, 'Unemployment_rate'] = 5.0
    fig = create_bar_chart_race(tied, top_n=3)

    assert list(fig.frames[0].data[0].y) == ['Texas', 'New York', 'California']


def test_bar_chart_race_rejects_bad_input(annual_df):
    with pytest.raises(ValueError):
        create_bar_chart_race(annual_df, top_n=0)
    with pytest.raises(ValueError, match='no annual records'):
        create_bar_chart_race(annual_df.iloc[0:0])


def test_render_report_writes_html(annual_df, tmp_path):
    paths = render_report(annual_df, output_dir=str(tmp_path / 'charts'))

    assert len(paths) == 3
    for path in paths:
        assert os.path.exists(path)
        assert path.endswith('.html')
