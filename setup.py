from setuptools import setup

setup(name='todayamamoto',
    version='1.0',
    description='A module for testing Granger causality between possibly non-stationary time series with the Toda-Yamamoto procedure',
    packages=['todayamamoto'],
    python_requires='>=3.9',
    install_requires=['numpy', 'scipy', 'pandas'],
    extras_require={'test': ['pytest']},
    license="gpl-3.0"
)
