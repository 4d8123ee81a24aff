from .loader import (
    load_absorbance_csv,
    load_absorbance_df,
    load_absorbance_excel,
    load_absorbance_table,
    records_to_dataframe,
)

__all__ = [
    "load_absorbance_csv",
    "load_absorbance_df",
    "load_absorbance_excel",
    "load_absorbance_table",
    "records_to_dataframe",
]
