import pandas as pd
import numpy as np


def load_covariance_csv(path):
    """Load a labeled covariance matrix from CSV.

    The first column holds the row labels and the header holds the column
    labels; both must list the same symbols in the same order.

    Returns
    - (symbols, matrix): list of str and 2d ndarray
    """
    df = pd.read_csv(path, index_col=0)
    df = df.apply(pd.to_numeric, errors="coerce")
    rows = [str(s).strip() for s in df.index]
    cols = [str(s).strip() for s in df.columns]
    if rows != cols:
        raise ValueError("covariance CSV row labels must match its column labels")
    return cols, df.to_numpy(dtype=float)


def load_prices_csv(path, index_col=0, parse_dates=True):
    """Load a CSV of prices: one column per ticker, indexed by date."""
    df = pd.read_csv(path, index_col=index_col, parse_dates=parse_dates)
    df = df.apply(pd.to_numeric, errors="coerce")
    return df.sort_index()


def compute_returns(prices, kind="simple"):
    """Compute returns from price DataFrame.

    Parameters
    - prices: pd.DataFrame, columns are tickers, index are dates
    - kind: 'log' or 'simple'
    """
    if kind == "log":
        return np.log(prices / prices.shift(1)).dropna()
    elif kind == "simple":
        return prices.pct_change().dropna()
    else:
        raise ValueError("kind must be 'log' or 'simple'")


def estimate_inputs(prices, kind="simple"):
    """Estimate per-period expected returns and the covariance from prices.

    Returns
    - (symbols, mu, cov): list of str, 1d ndarray, 2d ndarray
    """
    returns = compute_returns(prices, kind=kind)
    if returns.shape[0] < 2:
        raise ValueError("Not enough return observations to estimate a covariance; provide a longer history")
    return [str(c) for c in returns.columns], returns.mean().to_numpy(), returns.cov().to_numpy()
