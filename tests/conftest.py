import pandas as pd
import pytest

from state_unemployment_compiler import StateUnemploymentCompiler

CENTROIDS = {
    'California': (36.78, -119.42),
    'Texas': (31.97, -99.90),
    'New York': (43.30, -74.22),
}


def make_row(state='California', year=2020, month=1, rate=5.0, **overrides):
    """One monthly record with plausible values for every column."""
    lat, lon = CENTROIDS.get(state, (40.0, -100.0))
    row = {
        'State': state,
        'Year': year,
        'Month': month,
        'Labor_Force_Participation_Ratio': 62.0,
        'Employment_Participation_Ratio': 59.0,
        'Labor_Force': 1000.0,
        'Employment': 1000.0 * (1 - rate / 100) if isinstance(rate, (int, float)) else 950.0,
        'Unemployment': 1000.0 * rate / 100 if isinstance(rate, (int, float)) else 50.0,
        'Unemployment_rate': rate,
        'Latitude': lat,
        'Longitude': lon,
    }
    row.update(overrides)
    return row


def make_frame(*rows):
    return pd.DataFrame(list(rows))


@pytest.fixture
def compiler(tmp_path):
    return StateUnemploymentCompiler(str(tmp_path / 'monthly.csv'))


@pytest.fixture
def monthly_df():
    """Two states over two years, with a duplicate, a sentinel and an out-of-range row."""
    return make_frame(
        make_row('California', 2019, 1, 4.0),
        make_row('California', 2019, 2, 4.2),
        make_row('California', 2020, 1, 5.0),
        make_row('California', 2020, 2, 7.0),
        make_row('California', 2020, 3, 6.0),
        make_row('California', 2020, 3, 6.0),  # duplicate
        make_row('Texas', 2019, 1, 3.5),
        make_row('Texas', 2019, 2, 'unknown'),
        make_row('Texas', 2020, 1, 8.0),
        make_row('Texas', 2020, 2, 150.0),  # out of range
    )


@pytest.fixture
def annual_df():
    """An already aggregated annual table."""
    rows = []
    for state, rates in [('California', [4.1, 6.0, 9.5]),
                         ('Texas', [3.5, 8.0, 5.5]),
                         ('New York', [4.0, 7.5, 6.8])]:
        lat, lon = CENTROIDS[state]
        for year, rate in zip([2019, 2020, 2021], rates):
            rows.append({
                'State': state,
                'Year': year,
                'Labor_Force_Participation_Ratio': 62.0,
                'Employment_Participation_Ratio': 59.0,
                'Labor_Force': 1000.0,
                'Employment': 1000.0 - rate * 10,
                'Unemployment': rate * 10,
                'Unemployment_rate': rate,
                'Latitude': lat,
                'Longitude': lon,
            })
    return pd.DataFrame(rows)


@pytest.fixture
def monthly_csv(tmp_path, monthly_df):
    path = tmp_path / 'monthly.csv'
    monthly_df.to_csv(path, index=False)
    return path
