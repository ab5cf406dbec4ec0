"""
Pytest configuration and fixtures.
"""

import numpy as np
import pandas as pd
import pytest


def simulate_chain(n=200, seed=0):
    """Simulate the I(1) causal chain x -> y -> z as cumulative sums of shocks."""
    rng = np.random.default_rng(seed)
    dx = rng.normal(size=n)
    dy = np.zeros(n)
    dz = np.zeros(n)
    for t in range(1, n):
        dy[t] = 0.8 * dx[t - 1] + rng.normal(scale=0.5)
        dz[t] = 0.8 * dy[t - 1] + rng.normal(scale=0.5)
    return np.cumsum(dx), np.cumsum(dy), np.cumsum(dz)


def simulate_var2(n=2000, seed=1):
    """Simulate a stationary bivariate VAR(2) without intercept."""
    rng = np.random.default_rng(seed)
    x = np.zeros(n)
    y = np.zeros(n)
    for t in range(2, n):
        x[t] = 0.5 * x[t - 1] - 0.4 * x[t - 2] + rng.normal()
        y[t] = 0.3 * y[t - 1] + 0.4 * x[t - 2] + rng.normal()
    return x, y


@pytest.fixture(scope="session")
def chain():
    x, y, z = simulate_chain()
    return {"x": x, "y": y, "z": z}


@pytest.fixture(scope="session")
def chain_datasets(chain):
    """Two data sets: y explained by x, and z explained by y and x."""
    return {
        "xy": pd.DataFrame({"y": chain["y"], "x": chain["x"]}),
        "chain": {"z": chain["z"], "y": chain["y"], "x": chain["x"]},
    }


@pytest.fixture(scope="session")
def var2():
    x, y = simulate_var2()
    return {"x": x, "y": y}
