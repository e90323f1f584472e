import streamlit as st

from state_reference import REGION_COLORS
from state_unemployment_compiler import DEFAULT_DATA_PATH, MalformedInputError, StateUnemploymentCompiler
from unemployment_charts import METRIC_LABELS, create_bar_chart_race, create_choropleth_animation, create_line_chart

# Custom CSS for the header and tabs
PAGE_CSS = """
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: 700;
        color: #1f1f1f;
        text-align: center;
        margin-bottom: 2rem;
    }
    .stTabs [data-baseweb="tab-list"] {
        gap: 1rem;
    }
    .stTabs [data-baseweb="tab"] {
        height: 2.5rem;
        background-color: #f0f2f6;
        border-radius: 0.3rem;
        color: #262730;
        font-weight: 600;
        font-size: 0.9rem;
    }
    .stTabs [aria-selected="true"] {
        background-color: #007acc;
        color: white;
    }
</style>
"""


@st.cache_data
def load_data(data_path: str = DEFAULT_DATA_PATH):
    """Load the annual table and the national roll-up"""
    compiler = StateUnemploymentCompiler(data_path)
    try:
        annual = compiler.compile_annual_data()
    except MalformedInputError as e:
        st.error(f"Could not load unemployment data: {e}")
        return None, None
    return annual, compiler.national_annual_summary(annual)


def calculate_metric(df, selected_states, metric_type):
    """Calculate metrics for sidebar"""
    if selected_states == ['All States']:
        filtered_data = df
    else:
        filtered_data = df[df['State'].isin(selected_states)]

    if filtered_data.empty:
        return 0

    if metric_type == 'latest_rate':
        latest = filtered_data[filtered_data['Year'] == filtered_data['Year'].max()]
        return round(latest['Unemployment_rate'].mean(), 1)
    elif metric_type == 'peak_rate':
        return round(filtered_data['Unemployment_rate'].max(), 1)
    elif metric_type == 'weighted_rate':
        # Labour-force-weighted rate over the whole selection
        labor_force = filtered_data['Labor_Force'].sum()
        if labor_force == 0:
            return 0
        return round(filtered_data['Unemployment'].sum() / labor_force * 100, 1)
    elif metric_type == 'latest_unemployed':
        latest = filtered_data[filtered_data['Year'] == filtered_data['Year'].max()]
        return int(latest['Unemployment'].sum())

    return 0


def show_chart(build, *args, **kwargs):
    """Draw a figure, or explain why it cannot be drawn"""
    try:
        fig = build(*args, **kwargs)
    except ValueError as e:
        st.error(f"Could not draw chart: {e}")
        return None
    st.plotly_chart(fig, use_container_width=True)
    return fig


def main():
    st.set_page_config(
        page_title="State Unemployment Dashboard",
        layout="wide",
        initial_sidebar_state="expanded"
    )
    st.markdown(PAGE_CSS, unsafe_allow_html=True)

    annual, national = load_data()
    if annual is None:
        st.stop()
    if annual.empty:
        st.warning("No valid state-year records remain after cleaning the input data.")
        st.stop()

    st.markdown('<h1 class="main-header">State Unemployment Dashboard</h1>', unsafe_allow_html=True)

    with st.sidebar:
        st.header("State Filter")
        available_states = ['All States'] + sorted(annual['State'].unique().tolist())
        selected_states = st.multiselect(
            "Select states to include:",
            available_states,
            default=['All States'],
            label_visibility="collapsed"
        )
        if not selected_states or 'All States' in selected_states:
            selected_states = ['All States']

        st.header("Metric")
        metric = st.selectbox(
            "Metric to plot:",
            list(METRIC_LABELS),
            format_func=lambda key: METRIC_LABELS[key],
            label_visibility="collapsed"
        )

        st.markdown("---")
        st.header("Current Selection")
        st.metric("Latest Mean Rate", f"{calculate_metric(annual, selected_states, 'latest_rate')}%")
        st.metric("Peak State Rate", f"{calculate_metric(annual, selected_states, 'peak_rate')}%")
        st.metric("Weighted Rate (all years)", f"{calculate_metric(annual, selected_states, 'weighted_rate')}%")
        st.metric("Unemployed (latest year)",
                  f"{calculate_metric(annual, selected_states, 'latest_unemployed'):,}")

        st.markdown("---")
        st.markdown("**Dataset Info**")
        st.text(f"Records: {len(annual):,}")
        st.text(f"Years: {annual['Year'].min()}-{annual['Year'].max()}")

        st.markdown("---")
        st.markdown("**Region Colors**")
        for region, color in REGION_COLORS.items():
            st.markdown(f'<span style="color: {color};">■</span> **{region}**', unsafe_allow_html=True)

    map_tab, trend_tab, race_tab = st.tabs(["Map", "Trends", "Bar Chart Race"])

    with map_tab:
        st.header(f"{METRIC_LABELS[metric]} by State")
        st.markdown("Press play to step through the years. The colour scale is fixed across years.")
        show_chart(create_choropleth_animation, annual, metric=metric)

    with trend_tab:
        st.header(f"{METRIC_LABELS[metric]} per Year")
        states = None if selected_states == ['All States'] else selected_states
        show_chart(create_line_chart, annual, states=states, metric=metric,
                   national=national if states is None else None)
        if metric == 'Unemployment_rate' and states is None:
            st.info("The dashed line is the national rate, weighted by each state's labour force.")

    with race_tab:
        top_n = st.slider("States shown", min_value=5, max_value=20, value=10)
        show_chart(create_bar_chart_race, annual, top_n=top_n, metric=metric)

    st.download_button(
        "Download annual table (CSV)",
        data=annual.to_csv(index=False).encode('utf-8'),
        file_name='state_unemployment_annual.csv',
        mime='text/csv',
    )


if __name__ == "__main__":
    main()
