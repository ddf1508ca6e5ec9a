"""Unit conversions and derived quantities (altitude, dew point, heat index).

These helpers stay free of bus and I/O dependencies so they can be reused in
command-line scripts, automated tests, or offline analysis alike.
"""
