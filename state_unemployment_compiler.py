import logging
import os
import sys

import numpy as np
import pandas as pd

from state_reference import add_state_reference

# Set up logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = 'unemployment_data_us_state.csv'
ANNUAL_OUTPUT_FILENAME = 'state_unemployment_annual.csv'

SENTINEL_VALUES = ('NA', 'unknown')
RATE_BOUNDS = (0, 100)

METRIC_COLUMNS = [
    'Labor_Force_Participation_Ratio',
    'Employment_Participation_Ratio',
    'Labor_Force',
    'Employment',
    'Unemployment',
    'Unemployment_rate',
]
CENTROID_COLUMNS = ['Latitude', 'Longitude']
KEY_COLUMNS = ['State', 'Year']
REQUIRED_COLUMNS = KEY_COLUMNS + METRIC_COLUMNS + CENTROID_COLUMNS
# Fields of a monthly record; any other input column is carried along but never checked
RECORD_COLUMNS = REQUIRED_COLUMNS + ['Month']


class MalformedInputError(Exception):
    """The input file is missing, unreadable, or lacks required columns."""


def _first_encountered(values: pd.Series):
    return values.iloc[0]


class StateUnemploymentCompiler:
    """
    Compiles monthly U.S. state unemployment statistics into an annual table.

    Pipeline: deduplicate -> normalize sentinels -> coerce numerics ->
    drop incomplete rows -> range filter -> group by (State, Year) and average.
    The annual table is sorted by State, then Year, and is what every chart
    in the report consumes.
    """

    def __init__(self, data_path: str = DEFAULT_DATA_PATH):
        self.data_path = data_path

    def load_monthly_data(self) -> pd.DataFrame:
        """Read the monthly CSV and check that every required column is present."""
        path = self.data_path
        logger.info(f"Reading monthly unemployment data from {path}...")

        if not os.path.exists(path):
            logger.error(f"File {path} not found in current directory: {os.getcwd()}")
            raise MalformedInputError(f"Input file not found: {path}")

        try:
            df = pd.read_csv(path)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as e:
            logger.error(f"Could not parse {path}: {e}")
            raise MalformedInputError(f"Could not read {path}: {e}") from e

        df.columns = [str(col).strip() for col in df.columns]
        missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
        if missing:
            logger.error(f"{path} is missing required columns: {missing}")
            raise MalformedInputError(
                f"{path} is missing required columns: {missing}. Found: {list(df.columns)}"
            )

        logger.info(f"Loaded {len(df)} monthly records with columns: {df.columns.tolist()}")
        return df

    def deduplicate(self, df: pd.DataFrame) -> pd.DataFrame:
        """Drop rows identical in every field to an earlier row, keeping row order."""
        before = len(df)
        df = df.drop_duplicates(keep='first')
        logger.info(f"After deduplication: {len(df)} records ({before - len(df)} duplicates removed)")
        return df

    def normalize_sentinels(self, df: pd.DataFrame) -> pd.DataFrame:
        """Turn literal placeholder strings into missing values in every record field."""
        sentinel_mask = df.isin(SENTINEL_VALUES)
        sentinel_mask.loc[:, ~sentinel_mask.columns.isin(RECORD_COLUMNS)] = False
        found = int(sentinel_mask.to_numpy().sum())
        if found:
            logger.info(f"Replacing {found} sentinel values {SENTINEL_VALUES} with missing values")
        return df.mask(sentinel_mask)

    def coerce_numeric(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        for col in ['Year'] + METRIC_COLUMNS + CENTROID_COLUMNS:
            if col in df.columns:
                df[col] = pd.to_numeric(df[col], errors='coerce')
        if 'Year' in df.columns:
            # a fractional year is not a valid record
            df['Year'] = df['Year'].where(df['Year'] % 1 == 0)
        return df

    def drop_incomplete(self, df: pd.DataFrame) -> pd.DataFrame:
        """Remove any row with a missing value in any record field."""
        before = len(df)
        df = df.dropna(how='any', subset=[col for col in RECORD_COLUMNS if col in df.columns])
        if 'Year' in df.columns:
            df = df.astype({'Year': int})
        logger.info(f"After dropping incomplete rows: {len(df)} records ({before - len(df)} removed)")
        return df

    def filter_rate_range(self, df: pd.DataFrame) -> pd.DataFrame:
        """Keep rows whose Unemployment_rate lies in the closed range [0, 100]."""
        before = len(df)
        low, high = RATE_BOUNDS
        df = df[df['Unemployment_rate'].between(low, high, inclusive='both')]
        logger.info(f"After rate range filter: {len(df)} records ({before - len(df)} out of range)")
        return df

    def clean(self, df: pd.DataFrame) -> pd.DataFrame:
        """Run every row-level cleaning step; sentinels are normalized before the missing-value drop."""
        if df.empty:
            return df

        logger.info("Cleaning monthly dataset...")
        df = self.deduplicate(df)
        df = self.normalize_sentinels(df)
        df = self.coerce_numeric(df)
        df = self.drop_incomplete(df)
        df = self.filter_rate_range(df)
        return df

    def annual_means(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Reduce monthly rows to one row per (State, Year).

        Metrics are averaged with missing values skipped, so a metric missing
        for every member of a group comes out NaN rather than zero.
        Latitude/Longitude are taken from the first row of each group.
        """
        agg_spec = {col: 'mean' for col in METRIC_COLUMNS}
        agg_spec.update({col: _first_encountered for col in CENTROID_COLUMNS})

        annual = df.groupby(KEY_COLUMNS, sort=True).agg(agg_spec).reset_index()
        return annual[REQUIRED_COLUMNS]

    def aggregate(self, df: pd.DataFrame) -> pd.DataFrame:
        """Clean monthly records and aggregate them into the annual table."""
        cleaned = self.clean(df)
        if cleaned.empty:
            logger.warning("No valid monthly records left after cleaning")
            return pd.DataFrame(columns=REQUIRED_COLUMNS)

        annual = self.annual_means(cleaned)
        logger.info(
            f"Aggregated {len(cleaned)} monthly records into {len(annual)} state-year records "
            f"({annual['State'].nunique()} states, {annual['Year'].min()}-{annual['Year'].max()})"
        )
        return annual

    def compile_annual_data(self) -> pd.DataFrame:
        """Load the monthly CSV and return the annual table with state codes and regions."""
        monthly = self.load_monthly_data()
        annual = self.aggregate(monthly)
        return add_state_reference(annual)

    def national_annual_summary(self, annual: pd.DataFrame) -> pd.DataFrame:
        """Per-year national figures: labour-force-weighted rate, mean state rate, states reporting."""
        if annual.empty:
            return pd.DataFrame(columns=['Year', 'Labor_Force', 'Unemployment', 'Mean_State_Rate',
                                         'States_Reporting', 'National_Unemployment_rate'])

        national = annual.groupby('Year', sort=True).agg(
            Labor_Force=('Labor_Force', 'sum'),
            Unemployment=('Unemployment', 'sum'),
            Mean_State_Rate=('Unemployment_rate', 'mean'),
            States_Reporting=('State', 'nunique'),
        ).reset_index()

        labor_force = national['Labor_Force'].replace(0, np.nan)
        national['National_Unemployment_rate'] = national['Unemployment'] / labor_force * 100
        return national

    def create_summary_statistics(self, annual: pd.DataFrame) -> dict:
        """Create summary statistics for the annual dataset."""
        if annual.empty:
            return {}

        rates = annual.dropna(subset=['Unemployment_rate'])
        if rates.empty:
            return {}
        highest = rates.loc[rates['Unemployment_rate'].idxmax()]
        lowest = rates.loc[rates['Unemployment_rate'].idxmin()]

        return {
            'total_records': len(annual),
            'states_count': annual['State'].nunique(),
            'years_covered': f"{annual['Year'].min()}-{annual['Year'].max()}",
            'highest_rate': {
                'state': highest['State'],
                'year': int(highest['Year']),
                'rate': float(highest['Unemployment_rate']),
            },
            'lowest_rate': {
                'state': lowest['State'],
                'year': int(lowest['Year']),
                'rate': float(lowest['Unemployment_rate']),
            },
            'yearly_mean_rate': annual.groupby('Year')['Unemployment_rate'].mean().to_dict(),
        }

    def validate_year_over_year(self, annual: pd.DataFrame, threshold: float = 3.0) -> pd.DataFrame:
        """Flag state-years whose rate moved more than `threshold` points from the prior year."""
        if annual.empty:
            return pd.DataFrame(columns=['State', 'Year', 'Unemployment_rate', 'Change'])

        logger.info(f"Validating year-over-year changes (threshold {threshold} points)...")

        df = annual.sort_values(KEY_COLUMNS)[['State', 'Year', 'Unemployment_rate']].copy()
        by_state = df.groupby('State')
        df['Change'] = by_state['Unemployment_rate'].diff()
        consecutive = by_state['Year'].diff() == 1

        flagged = df[consecutive & (df['Change'].abs() > threshold)].reset_index(drop=True)
        for row in flagged.itertuples(index=False):
            logger.warning(
                f"{row.State} {row.Year}: unemployment rate {row.Unemployment_rate:.1f}% "
                f"({row.Change:+.1f} points vs {row.Year - 1})"
            )
        return flagged

    def save_annual_dataset(self, annual: pd.DataFrame, path: str = ANNUAL_OUTPUT_FILENAME) -> str:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        annual.to_csv(path, index=False)
        logger.info(f"Saved {len(annual)} annual records to {path}")
        return path

    def compile_report(self, output_dir: str = '.', threshold: float = 3.0):
        """Main method: build the annual table and render every chart."""
        from unemployment_charts import render_report

        print("STATE UNEMPLOYMENT REPORT")
        print("=" * 70)

        print("Step 1: Loading and aggregating monthly data...")
        annual = self.compile_annual_data()
        if annual.empty:
            logger.error("No data remaining after processing!")
            return annual, []

        stats = self.create_summary_statistics(annual)
        print(f"Records: {stats['total_records']:,}")
        print(f"States: {stats['states_count']}")
        print(f"Years: {stats['years_covered']}")
        high, low = stats['highest_rate'], stats['lowest_rate']
        print(f"Highest: {high['state']} {high['year']} at {high['rate']:.1f}%")
        print(f"Lowest: {low['state']} {low['year']} at {low['rate']:.1f}%")

        print("\nStep 2: Validating year-over-year changes...")
        flagged = self.validate_year_over_year(annual, threshold=threshold)
        print(f"{len(flagged)} state-years moved more than {threshold} points")

        print("\nStep 3: Rendering charts...")
        paths = render_report(annual, output_dir=output_dir,
                              national=self.national_annual_summary(annual))
        for path in paths:
            print(f"  {path}")

        return annual, paths


def main():
    """Run the state unemployment report."""
    try:
        compiler = StateUnemploymentCompiler()
        compiler.compile_report()
    except KeyboardInterrupt:
        print("\n\nProcess interrupted by user.")
        sys.exit(130)
    except MalformedInputError:
        logger.exception("Input data could not be used:")
        sys.exit(1)
    except ValueError:
        logger.exception("Charts could not be drawn from the annual data:")
        sys.exit(1)


if __name__ == "__main__":
    main()
