"""Static reference data for U.S. states: postal codes, census regions, colours."""

import pandas as pd

# State name -> (USPS code, census region)
STATES = {
    'Alabama': ('AL', 'South'), 'Alaska': ('AK', 'West'), 'Arizona': ('AZ', 'West'),
    'Arkansas': ('AR', 'South'), 'California': ('CA', 'West'), 'Colorado': ('CO', 'West'),
    'Connecticut': ('CT', 'Northeast'), 'Delaware': ('DE', 'South'),
    'District of Columbia': ('DC', 'South'), 'Florida': ('FL', 'South'),
    'Georgia': ('GA', 'South'), 'Hawaii': ('HI', 'West'), 'Idaho': ('ID', 'West'),
    'Illinois': ('IL', 'Midwest'), 'Indiana': ('IN', 'Midwest'), 'Iowa': ('IA', 'Midwest'),
    'Kansas': ('KS', 'Midwest'), 'Kentucky': ('KY', 'South'), 'Louisiana': ('LA', 'South'),
    'Maine': ('ME', 'Northeast'), 'Maryland': ('MD', 'South'),
    'Massachusetts': ('MA', 'Northeast'), 'Michigan': ('MI', 'Midwest'),
    'Minnesota': ('MN', 'Midwest'), 'Mississippi': ('MS', 'South'), 'Missouri': ('MO', 'Midwest'),
    'Montana': ('MT', 'West'), 'Nebraska': ('NE', 'Midwest'), 'Nevada': ('NV', 'West'),
    'New Hampshire': ('NH', 'Northeast'), 'New Jersey': ('NJ', 'Northeast'),
    'New Mexico': ('NM', 'West'), 'New York': ('NY', 'Northeast'),
    'North Carolina': ('NC', 'South'), 'North Dakota': ('ND', 'Midwest'), 'Ohio': ('OH', 'Midwest'),
    'Oklahoma': ('OK', 'South'), 'Oregon': ('OR', 'West'), 'Pennsylvania': ('PA', 'Northeast'),
    'Rhode Island': ('RI', 'Northeast'), 'South Carolina': ('SC', 'South'),
    'South Dakota': ('SD', 'Midwest'), 'Tennessee': ('TN', 'South'), 'Texas': ('TX', 'South'),
    'Utah': ('UT', 'West'), 'Vermont': ('VT', 'Northeast'), 'Virginia': ('VA', 'South'),
    'Washington': ('WA', 'West'), 'West Virginia': ('WV', 'South'),
    'Wisconsin': ('WI', 'Midwest'), 'Wyoming': ('WY', 'West'),
    'Puerto Rico': ('PR', 'Territory'),
}

REGION_COLORS = {
    'Northeast': '#1E90FF',  # Blue
    'Midwest': '#2E8B57',  # Green
    'South': '#DC143C',  # Red
    'West': '#FF8C00',  # Orange
    'Territory': '#FF69B4',  # Pink
}


def get_state_code(state):
    """Return the USPS code for a state name, or None if unknown."""
    entry = STATES.get(str(state).strip())
    return entry[0] if entry else None


def get_region(state):
    entry = STATES.get(str(state).strip())
    return entry[1] if entry else None


def get_color_for_region(region):
    """Return color based on census region"""
    return REGION_COLORS.get(region, '#808080')  # Gray


def add_state_reference(df: pd.DataFrame) -> pd.DataFrame:
    """Add State_Code and Region columns keyed on the State column."""
    df = df.copy()
    df['State_Code'] = df['State'].map(get_state_code)
    df['Region'] = df['State'].map(get_region)
    return df
